"""Reading list structure: lists, sections and items.

Children are held strongly by their parent in `entries`; the parent is held only
through a weak reference, so `parent` is for navigation and never owns anything.
`entries` keeps the display order declared by the linked-data source, including
`None` holes where positions are missing.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from shelfmark.domain.errors import CyclicReferenceError
from shelfmark.domain.model.base import Node
from shelfmark.domain.model.enums import LengthMode, NodeKind, TitleAlternative

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping
    from datetime import datetime

    from shelfmark.domain.model.reference import Digitisation, Module, TimePeriod
    from shelfmark.domain.model.resource import Resource
    from shelfmark.domain.model.user import User


@dataclass(eq=False, kw_only=True)
class ListObject(Node):
    """Common traversal behaviour of lists, sections and items."""

    _entries: tuple[ListObject | None, ...] = field(default=(), init=False, repr=False)
    _parent_ref: weakref.ReferenceType[ListObject] | None = field(
        default=None, init=False, repr=False
    )

    # Construction hooks used by the object factory. The node is handed out only
    # after both have been called, and is not modified afterwards.

    def attach_parent(self, parent: ListObject | None) -> None:
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    def set_entries(self, entries: Iterable[ListObject | None]) -> None:
        self._entries = tuple(entries)

    @property
    def entries(self) -> tuple[ListObject | None, ...]:
        """Direct children in display order, with `None` for missing positions."""
        return self._entries

    @property
    def parent(self) -> ListObject | None:
        return self._parent_ref() if self._parent_ref is not None else None

    def __iter__(self) -> Iterator[ListObject]:
        return self.iter_children()

    def iter_children(self) -> Iterator[ListObject]:
        """Yield direct children in display order, skipping holes."""
        for entry in self._entries:
            if entry is not None:
                yield entry

    def iter_items(self) -> Iterator[Item]:
        """Yield the list items below this object (depth-first, display order)."""
        for entry in self.iter_children():
            if isinstance(entry, Item):
                yield entry
            else:
                yield from entry.iter_items()

    def iter_sections(self) -> Iterator[Section]:
        """Yield the sections below this object (depth-first, display order).

        Only lists and sections are descended into; items never contain sections.
        """
        for entry in self.iter_children():
            if isinstance(entry, Section):
                yield entry
                yield from entry.iter_sections()
            elif isinstance(entry, ReadingList):
                yield from entry.iter_sections()

    def all_items(self) -> list[Item]:
        return list(self.iter_items())

    @property
    def sections(self) -> list[Section]:
        """Direct child sections."""
        return [entry for entry in self.iter_children() if isinstance(entry, Section)]

    def ancestors(self, *kinds: type[ListObject]) -> list[ListObject]:
        """Return ancestors nearest-first, optionally restricted to the given classes."""
        result: list[ListObject] = []
        seen = {id(self)}
        ancestor = self.parent
        while ancestor is not None:
            if id(ancestor) in seen:
                raise CyclicReferenceError(
                    f"Cyclic parent reference at {ancestor.uri}", uri=ancestor.uri
                )
            seen.add(id(ancestor))
            if not kinds or isinstance(ancestor, kinds):
                result.append(ancestor)
            ancestor = ancestor.parent
        return result

    @property
    def parent_lists(self) -> list[ReadingList]:
        return [a for a in self.ancestors(ReadingList) if isinstance(a, ReadingList)]

    @property
    def parent_list(self) -> ReadingList | None:
        lists = self.parent_lists
        return lists[0] if lists else None

    @property
    def parent_sections(self) -> list[Section]:
        return [a for a in self.ancestors(Section) if isinstance(a, Section)]

    @property
    def parent_section(self) -> Section | None:
        sections = self.parent_sections
        return sections[0] if sections else None

    def length(self, mode: LengthMode | str = LengthMode.ITEM) -> int:
        """Count entries, items or sections.

        ENTRY counts direct positions (holes included), SECTION counts direct child
        sections, and ITEM counts list items recursively.
        """
        mode = LengthMode(mode)
        if mode is LengthMode.ENTRY:
            return len(self._entries)
        if mode is LengthMode.SECTION:
            return len(self.sections)
        return sum(entry.length(LengthMode.ITEM) for entry in self.iter_children())


@dataclass(eq=False, kw_only=True)
class ReadingList(ListObject):
    KIND: ClassVar[NodeKind] = NodeKind.LIST

    name: str | None = None
    description: str | None = None
    created: datetime | None = None
    last_updated: datetime | None = None
    last_published: datetime | None = None
    owner: tuple[User, ...] = field(default_factory=tuple)
    creator: tuple[User, ...] = field(default_factory=tuple)
    publisher: User | None = None
    modules: tuple[Module, ...] = field(default_factory=tuple)
    time_period: TimePeriod | None = None
    # item URI -> item record from the list details API
    items: Mapping[str, Mapping[str, Any]] = field(default_factory=dict, repr=False)
    list_history: Any = field(default=None, repr=False)

    def length(self, mode: LengthMode | str = LengthMode.ITEM) -> int:
        # The list details API is authoritative for the item count.
        mode = LengthMode(mode)
        if mode is LengthMode.ITEM:
            return len(self.items)
        return super().length(mode)

    def item_record(self, uri: str) -> Mapping[str, Any] | None:
        return self.items.get(uri)

    def __str__(self) -> str:
        return self.name or super().__str__()


@dataclass(eq=False, kw_only=True)
class Section(ListObject):
    KIND: ClassVar[NodeKind] = NodeKind.SECTION

    name: str | None = None
    description: str | None = None

    def __str__(self) -> str:
        return self.name or super().__str__()


@dataclass(eq=False, kw_only=True)
class Item(ListObject):
    """A list item (citation). Always counts as a single item."""

    KIND: ClassVar[NodeKind] = NodeKind.ITEM

    title: str | None = None
    importance: str | None = None
    library_note: str | None = None
    student_note: str | None = None
    note: str | None = None
    local_control_number: str | None = None
    resource: Resource | None = None
    digitisation: Digitisation | None = None

    def length(self, mode: LengthMode | str = LengthMode.ITEM) -> int:
        mode = LengthMode(mode)
        if mode is LengthMode.ITEM:
            return 1
        return super().length(mode)

    def resolve_title(
        self, alternative: TitleAlternative | str = TitleAlternative.NONE
    ) -> str | None:
        """Return the resource title, or the chosen alternative if there is no resource."""
        if self.resource is not None:
            return self.resource.title or self.title
        match TitleAlternative(alternative):
            case TitleAlternative.LIBRARY_NOTE | TitleAlternative.PRIVATE_NOTE:
                return self.library_note
            case TitleAlternative.NOTE:
                return self.student_note or self.note or self.library_note
            case TitleAlternative.PUBLIC_NOTE | TitleAlternative.STUDENT_NOTE:
                return self.student_note or self.note
            case TitleAlternative.URI:
                return self.uri
            case TitleAlternative.NONE:
                return None

    def __str__(self) -> str:
        return self.resolve_title(TitleAlternative.PUBLIC_NOTE) or ""
