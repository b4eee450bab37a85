"""Bibliographic resources and citation inheritance.

A resource may be part of a larger one (chapter -> book, article -> journal).
Each `citation_<field>` accessor returns the resource's own value when present and
otherwise climbs the `is_part_of` chain until some ancestor has one.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field
from typing import ClassVar

from shelfmark.domain.errors import CyclicReferenceError
from shelfmark.domain.model.base import Node
from shelfmark.domain.model.enums import CitationField, NodeKind

ARTICLE = "Article"
BOOK = "Book"
CHAPTER = "Chapter"
JOURNAL = "Journal"


def _is_absent(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value
    if isinstance(value, Collection):
        return len(value) == 0
    return False


def _citation(name: CitationField) -> property:
    def getter(self: Resource) -> object:
        return self.citation(name)

    getter.__name__ = f"citation_{name.value}"
    getter.__doc__ = f"`{name.value}` of this resource or its nearest `is_part_of` ancestor."
    return property(getter)


@dataclass(eq=False, kw_only=True)
class Resource(Node):
    KIND: ClassVar[NodeKind] = NodeKind.RESOURCE

    authors: tuple[str, ...] = field(default_factory=tuple)
    book_jacket_url: str | None = None
    date: str | None = None
    doi: str | None = None
    edition: str | None = None
    edition_data: object = None
    eissn: str | None = None
    isbn10: str | None = None
    isbn13: str | None = None
    isbns: tuple[str, ...] = field(default_factory=tuple)
    issn: str | None = None
    issue: str | None = None
    issued: object = None
    latest_edition: object = None
    local_control_number: str | None = None
    online_resource: bool = False
    page: str | None = None
    page_end: str | None = None
    page_start: str | None = None
    place_of_publication: str | None = None
    publisher: str | None = None
    title: str | None = None
    type: str | None = None
    url: str | None = None
    volume: str | None = None

    # Directed, non-owning links. They may form a chain; a cycle is a data error.
    is_part_of: Resource | None = field(default=None, repr=False)
    has_part: Resource | None = field(default=None, repr=False)

    def citation(self, name: CitationField | str) -> object:
        """Return `name` from this resource, else from the nearest ancestor that has it."""
        attribute = CitationField(name).value
        seen: set[int] = set()
        resource: Resource | None = self
        while resource is not None:
            if id(resource) in seen:
                raise CyclicReferenceError(
                    f"Cyclic resource reference at {resource.uri}", uri=resource.uri
                )
            seen.add(id(resource))
            value = getattr(resource, attribute)
            if not _is_absent(value):
                return value
            resource = resource.is_part_of
        return None

    citation_authors = _citation(CitationField.AUTHORS)
    citation_book_jacket_url = _citation(CitationField.BOOK_JACKET_URL)
    citation_date = _citation(CitationField.DATE)
    citation_doi = _citation(CitationField.DOI)
    citation_edition = _citation(CitationField.EDITION)
    citation_edition_data = _citation(CitationField.EDITION_DATA)
    citation_eissn = _citation(CitationField.EISSN)
    citation_has_part = _citation(CitationField.HAS_PART)
    citation_is_part_of = _citation(CitationField.IS_PART_OF)
    citation_isbn10 = _citation(CitationField.ISBN10)
    citation_isbn13 = _citation(CitationField.ISBN13)
    citation_isbns = _citation(CitationField.ISBNS)
    citation_issn = _citation(CitationField.ISSN)
    citation_issue = _citation(CitationField.ISSUE)
    citation_issued = _citation(CitationField.ISSUED)
    citation_latest_edition = _citation(CitationField.LATEST_EDITION)
    citation_local_control_number = _citation(CitationField.LOCAL_CONTROL_NUMBER)
    citation_online_resource = _citation(CitationField.ONLINE_RESOURCE)
    citation_page = _citation(CitationField.PAGE)
    citation_page_end = _citation(CitationField.PAGE_END)
    citation_page_start = _citation(CitationField.PAGE_START)
    citation_place_of_publication = _citation(CitationField.PLACE_OF_PUBLICATION)
    citation_publisher = _citation(CitationField.PUBLISHER)
    citation_type = _citation(CitationField.TYPE)
    citation_url = _citation(CitationField.URL)
    citation_volume = _citation(CitationField.VOLUME)

    @property
    def citation_title(self) -> str | None:
        """Article title for articles, book title for books, otherwise the title."""
        return self.article_title or self.book_title or self.title

    @property
    def article_title(self) -> str | None:
        return self._part_title_by_type(ARTICLE)

    @property
    def chapter_title(self) -> str | None:
        return self._part_title_by_type(CHAPTER)

    @property
    def book_title(self) -> str | None:
        return self._part_of_title_by_type(BOOK)

    @property
    def journal_title(self) -> str | None:
        return self._part_of_title_by_type(JOURNAL)

    @property
    def part_title(self) -> str | None:
        return self.has_part.title if self.has_part is not None else None

    @property
    def part_of_title(self) -> str | None:
        return self.is_part_of.title if self.is_part_of is not None else None

    def _part_title_by_type(self, resource_type: str) -> str | None:
        if self.type == resource_type:
            return self.title
        if self.has_part is not None and self.has_part.type == resource_type:
            return self.has_part.title
        return None

    def _part_of_title_by_type(self, resource_type: str) -> str | None:
        if self.type == resource_type:
            return self.title
        if self.is_part_of is not None and self.is_part_of.type == resource_type:
            return self.is_part_of.title
        return None

    def __str__(self) -> str:
        return self.title or ""
