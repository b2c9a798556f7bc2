"""HTTP API for the storehook service."""

from storehook.api.routes import ErrorResponse, app, create_app

__all__ = [
    "ErrorResponse",
    "app",
    "create_app",
]
