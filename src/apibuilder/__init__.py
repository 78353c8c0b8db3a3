"""API Builder - no-code REST API builder.

Users define collections of typed fields and every collection is served as
a set of CRUD endpoints with relation population and per-route access
settings.
"""

__version__ = "0.1.0"

from apibuilder.infrastructure.api.app import app

__all__ = ["app", "__version__"]
