"""HTTP layer: FastAPI app factory and routes."""

from welcome_service.api.app import create_app

__all__ = ["create_app"]
