"""Protocols for dependency injection in the article store."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class BlobStoreProtocol(Protocol):
    """Protocol for the host's whole-blob persistence capability."""

    async def read_blob(self) -> dict[str, Any] | None:
        """Return the entire persisted blob, or None if nothing was ever saved."""
        ...

    async def write_blob(self, data: dict[str, Any]) -> None:
        """Replace the entire persisted blob."""
        ...


@runtime_checkable
class NotifierProtocol(Protocol):
    """Protocol for surfacing human-readable notices to the user."""

    def notify(self, title: str, description: str, *, error: bool = False) -> None:
        """Show a notice."""
        ...
