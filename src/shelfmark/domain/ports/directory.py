"""Port for institutional directory lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


@runtime_checkable
class DirectorySession(Protocol):
    """An open, bound directory connection."""

    def search_uids(self, attribute: str, value: str) -> Iterable[Sequence[str]]:
        """Yield the `uid` values of each entry whose `attribute` equals `value`."""
        ...

    def close(self) -> None: ...


__all__ = ["DirectorySession"]
