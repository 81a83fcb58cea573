"""
Data access for `User` documents.

The repository never holds a connection of its own: every call resolves the
collection through the supervisor, so a query issued before the first
successful connection raises `StoreUnavailableError` instead of hanging.
"""

from __future__ import annotations

from typing import Any, Optional

from pymongo.errors import PyMongoError

from welcome_service.domain.models import USERS_COLLECTION, User
from welcome_service.exceptions import RecordNotFoundError, StoreUnavailableError
from welcome_service.infrastructure.supervisor import ConnectionSupervisor
from welcome_service.utils.logging import get_logger

log = get_logger(__name__)


class UserRepository:
    def __init__(
        self, supervisor: ConnectionSupervisor, collection_name: str = USERS_COLLECTION
    ) -> None:
        self._supervisor = supervisor
        self.collection_name = collection_name

    @property
    def collection(self) -> Any:
        return self._supervisor.database[self.collection_name]

    async def insert(self, name: str) -> User:
        """Insert a new user unconditionally; duplicates by name are allowed."""
        user = User.new(name)
        result = await self.collection.insert_one(user.to_document())
        return user.model_copy(update={"id": result.inserted_id})

    async def upsert_by_name(self, name: str) -> User:
        """Insert a user only if none with this name exists yet."""
        # the equality filter supplies `name` on insert
        on_insert = {k: v for k, v in User.new(name).to_document().items() if k != "name"}
        await self.collection.update_one(
            {"name": name},
            {"$setOnInsert": on_insert},
            upsert=True,
        )
        document = await self.collection.find_one({"name": name})
        if document is None:
            raise RecordNotFoundError(self.collection_name)
        return User.from_document(document)

    async def first(self) -> User:
        """Return the first user in natural order."""
        document = await self.collection.find_one()
        if document is None:
            raise RecordNotFoundError(self.collection_name)
        return User.from_document(document)

    async def count(self) -> int:
        return await self.collection.count_documents({})


async def seed_user(
    supervisor: ConnectionSupervisor,
    repository: UserRepository,
    name: str,
    timeout: float,
    idempotent: bool = False,
) -> Optional[User]:
    """
    Save the startup seed record once the store is reachable.

    Waits up to `timeout` seconds for the first connection. Any failure is
    logged and swallowed: seeding never blocks startup and is not retried.
    """
    if not await supervisor.wait_connected(timeout):
        log.error(
            "Seed record %r not saved: store still unavailable after %.1fs",
            name,
            timeout,
            extra={"state": supervisor.state.value},
        )
        return None

    try:
        if idempotent:
            user = await repository.upsert_by_name(name)
        else:
            user = await repository.insert(name)
    except (PyMongoError, StoreUnavailableError, RecordNotFoundError) as exc:
        log.error("Seed record %r not saved: %s", name, exc)
        return None

    log.info("%s saved to the database", user.name)
    return user


__all__ = ["UserRepository", "seed_user"]
