"""
Infrastructure package for the welcome service.

Centralizes document store concerns (connection supervision, data access).
Keep this layer focused on I/O and resource management, decoupled from the
HTTP routes.
"""

from welcome_service.infrastructure.repository import UserRepository, seed_user
from welcome_service.infrastructure.supervisor import (
    ConnectionState,
    ConnectionSupervisor,
    default_client_factory,
)

__all__ = [
    "ConnectionState",
    "ConnectionSupervisor",
    "default_client_factory",
    "UserRepository",
    "seed_user",
]
