"""Ports for fetching reading list data from the remote service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

# URI -> property URI -> list of {"type": ..., "value": ...} pairs
LinkedDataBundle = dict[str, dict[str, list[dict[str, Any]]]]


@runtime_checkable
class ReadingListSource(Protocol):
    """Sequential access to the REST and linked-data representations of the service."""

    def fetch_list_details(
        self, list_id: str, **params: str | int
    ) -> Mapping[str, Any] | None: ...

    def fetch_list_history(self, list_id: str) -> Any: ...

    def fetch_user_profile(self, user_id: str) -> Mapping[str, Any] | None: ...

    def fetch_linked_data(self, uri: str) -> LinkedDataBundle: ...


__all__ = ["LinkedDataBundle", "ReadingListSource"]
