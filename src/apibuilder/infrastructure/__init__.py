"""Infrastructure layer - External dependencies and implementations.

This layer contains the database adapters (SQLAlchemy) and the HTTP
surface (FastAPI) built on top of the domain layer.
"""
