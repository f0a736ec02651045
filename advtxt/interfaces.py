"""Protocol interfaces for engine backends."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

PLAYER = "player"
ROOM = "room"


@runtime_checkable
class IOBackend(Protocol):
    """Interface for input and output backends."""

    def get_input(self, prompt: str | None = None) -> str:  # pragma: no cover - interface
        """Return user input, showing ``prompt`` or the backend's own."""
        ...

    def output(self, text: str) -> None:  # pragma: no cover - interface
        """Display ``text`` to the user."""
        ...


@runtime_checkable
class ReplySink(Protocol):
    """Receives the replies of a finished turn, in order."""

    def emit(self, reply: str) -> None:  # pragma: no cover - interface
        ...


@runtime_checkable
class Storage(Protocol):
    """Document store holding the ``player`` and ``room`` collections.

    Selectors are exact-match field sets.  Implementations raise
    :class:`advtxt.persistence.StorageError` when the store itself fails.
    """

    async def find_one(self, collection: str, selector: dict[str, Any]) -> dict[str, Any] | None:  # pragma: no cover - interface
        """Return the first record matching ``selector`` or None."""
        ...

    async def insert_one(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:  # pragma: no cover - interface
        """Store ``record`` and return it with its ``_id``."""
        ...

    async def update(self, collection: str, selector: dict[str, Any], fields: dict[str, Any]) -> bool:  # pragma: no cover - interface
        """Set ``fields`` on the matching record; False if nothing matched."""
        ...


__all__ = ["PLAYER", "ROOM", "IOBackend", "ReplySink", "Storage"]
