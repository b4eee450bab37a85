"""Node-kind classification from URI shape.

Classification is a pure function of the URI (plus whether REST JSON was supplied),
kept apart from construction so the factory can dispatch on the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from shelfmark.domain.model.enums import NodeKind

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True, slots=True)
class UriRule:
    kind: NodeKind
    matches: Callable[[str, bool], bool]
    # True when the node is built from the linked-data bundle (fetched on demand)
    linked_data: bool


def _contains(segment: str, *, requires_json: bool = False) -> Callable[[str, bool], bool]:
    def predicate(uri: str, has_json: bool) -> bool:
        if requires_json and not has_json:
            return False
        return segment in uri

    return predicate


# Evaluated in order; the first matching rule wins.
URI_RULES: tuple[UriRule, ...] = (
    UriRule(NodeKind.ITEM, _contains("/items/"), linked_data=False),
    UriRule(NodeKind.RESOURCE, _contains("/resources/", requires_json=True), linked_data=False),
    UriRule(NodeKind.USER, _contains("/users/"), linked_data=False),
    UriRule(NodeKind.LIST, _contains("/lists/"), linked_data=True),
    UriRule(NodeKind.MODULE, _contains("/modules/"), linked_data=True),
    UriRule(NodeKind.RESOURCE, _contains("/resources/"), linked_data=True),
    UriRule(NodeKind.SECTION, _contains("/sections/"), linked_data=True),
)


def match_uri(uri: str | None, *, has_json: bool = False) -> UriRule | None:
    if not uri:
        return None
    for rule in URI_RULES:
        if rule.matches(uri, has_json):
            return rule
    return None


def classify_uri(uri: str | None, *, has_json: bool = False) -> NodeKind | None:
    """Return the node kind implied by the shape of `uri`, or None if unrecognised."""

    rule = match_uri(uri, has_json=has_json)
    return rule.kind if rule else None
