"""Base protocol for learned-mapping persistence backends."""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable


@runtime_checkable
class MappingBackend(Protocol):
    """Protocol that all persistence backends must implement.

    Keys and values are plain strings; the learning engine owns the
    encoding. Implementations may raise on I/O failure, the engine logs
    and continues.
    """

    def get(self, key: str) -> str | None:
        """Return the stored value for ``key``, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def keys(self) -> Iterable[str]:
        """Return every stored key."""
        ...


@runtime_checkable
class DeletableBackend(MappingBackend, Protocol):
    """A backend that also supports removing keys."""

    def delete(self, key: str) -> None:
        """Remove ``key``; a missing key is not an error."""
        ...
