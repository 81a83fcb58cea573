"""
Domain models for the welcome service.

Defines the single `User` document kept in the `users` collection. Field
aliases follow the camelCase keys the documents are stored with.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

USERS_COLLECTION = "users"


def _utcnow() -> datetime:
    # BSON dates have millisecond precision
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


class User(BaseModel):
    """
    Representation of a single document in the `users` collection.
    """

    id: Optional[Any] = Field(None, alias="_id", description="Store-assigned ObjectId.")
    name: str = Field(..., description="Display name of the user.")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def new(cls, name: str) -> "User":
        """Build an unsaved user with matching creation/update timestamps."""
        now = _utcnow()
        return cls(name=name, created_at=now, updated_at=now)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "User":
        return cls.model_validate(dict(document))

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the stored shape, leaving `_id` to the store when unset."""
        return self.model_dump(by_alias=True, exclude_none=True)


__all__ = ["User", "USERS_COLLECTION"]
