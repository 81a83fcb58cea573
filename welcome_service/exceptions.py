"""Exception types raised by the welcome service."""

from __future__ import annotations


class WelcomeServiceError(Exception):
    """Base class for all welcome service errors."""


class StoreUnavailableError(WelcomeServiceError):
    """The document store connection has not been established (yet)."""

    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"Document store is not connected (state={state})")


class RecordNotFoundError(WelcomeServiceError):
    """A query that needs at least one record found none."""

    def __init__(self, collection: str) -> None:
        self.collection = collection
        super().__init__(f"No record found in collection '{collection}'")


__all__ = ["WelcomeServiceError", "StoreUnavailableError", "RecordNotFoundError"]
