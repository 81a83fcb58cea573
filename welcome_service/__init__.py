"""
Welcome service - a thin HTTP API attached to MongoDB.

The service answers `GET /welcome` with the name of the user stored in the
database. Its moving part is the connection supervisor, which attaches the
process to MongoDB in the background and retries on a fixed delay until the
store is reachable, while the HTTP server keeps accepting requests.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from welcome_service.api.app import create_app
from welcome_service.config import Settings, get_settings
from welcome_service.domain.models import User
from welcome_service.exceptions import (
    RecordNotFoundError,
    StoreUnavailableError,
    WelcomeServiceError,
)
from welcome_service.infrastructure.repository import UserRepository, seed_user
from welcome_service.infrastructure.supervisor import ConnectionState, ConnectionSupervisor
from welcome_service.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Application
    "create_app",
    # Store
    "ConnectionState",
    "ConnectionSupervisor",
    "User",
    "UserRepository",
    "seed_user",
    # Errors
    "WelcomeServiceError",
    "StoreUnavailableError",
    "RecordNotFoundError",
    # Logging
    "configure_logging",
    "get_logger",
]
