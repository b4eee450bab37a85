"""
Base building blocks:
URI identity and the non-owning back-reference to the object factory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from shelfmark.domain.uris import id_from_uri

if TYPE_CHECKING:
    from shelfmark.domain.graph.factory import ObjectFactory
    from shelfmark.domain.model.enums import NodeKind


@dataclass(eq=False, kw_only=True)
class Node:
    """An Aspire object identified by its URI.

    Equality and hashing use the node type and URI, so two resolutions of the same
    URI compare equal. `factory` points at the factory that built the wider graph
    and is used only for further resolution, never for ownership.
    """

    uri: str
    factory: ObjectFactory | None = field(default=None, repr=False)

    # class-level discriminator; subclasses must override
    KIND: ClassVar[NodeKind]

    @property
    def kind(self) -> NodeKind:
        return self.KIND

    @property
    def id(self) -> str | None:
        return id_from_uri(self.uri)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        if not self.uri:
            return self is other
        return type(self) is type(other) and self.uri == other.uri

    def __hash__(self) -> int:
        if not self.uri:
            return id(self)
        return hash((type(self).__name__, self.uri))

    def __str__(self) -> str:
        return self.uri
