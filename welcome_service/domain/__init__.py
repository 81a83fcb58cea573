"""
Domain package for the welcome service.

Exports the document model persisted by the repository. Keep this package
focused on data definitions and validation concerns.
"""

from welcome_service.domain.models import USERS_COLLECTION, User

__all__ = [
    "User",
    "USERS_COLLECTION",
]
