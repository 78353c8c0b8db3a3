"""HTTP layer: FastAPI app factory, routers and schemas."""
