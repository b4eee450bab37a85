"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class NodeKind(StrEnum):
    LIST = "list"
    SECTION = "section"
    ITEM = "item"
    RESOURCE = "resource"
    MODULE = "module"
    TIME_PERIOD = "time_period"
    USER = "user"


class LengthMode(StrEnum):
    """What `ListObject.length` counts."""

    ENTRY = "entry"
    ITEM = "item"
    SECTION = "section"


class TitleAlternative(StrEnum):
    """Fallback used by `Item.resolve_title` when no resource is attached."""

    NONE = "none"
    LIBRARY_NOTE = "library_note"
    PRIVATE_NOTE = "private_note"
    NOTE = "note"
    PUBLIC_NOTE = "public_note"
    STUDENT_NOTE = "student_note"
    URI = "uri"


class UserMissPolicy(StrEnum):
    """What the object factory does with a user URI missing from its cache."""

    IGNORE = "ignore"
    FETCH = "fetch"


class CitationField(StrEnum):
    """Resource attributes inherited through the `is_part_of` chain."""

    AUTHORS = "authors"
    BOOK_JACKET_URL = "book_jacket_url"
    DATE = "date"
    DOI = "doi"
    EDITION = "edition"
    EDITION_DATA = "edition_data"
    EISSN = "eissn"
    HAS_PART = "has_part"
    IS_PART_OF = "is_part_of"
    ISBN10 = "isbn10"
    ISBN13 = "isbn13"
    ISBNS = "isbns"
    ISSN = "issn"
    ISSUE = "issue"
    ISSUED = "issued"
    LATEST_EDITION = "latest_edition"
    LOCAL_CONTROL_NUMBER = "local_control_number"
    ONLINE_RESOURCE = "online_resource"
    PAGE = "page"
    PAGE_END = "page_end"
    PAGE_START = "page_start"
    PLACE_OF_PUBLICATION = "place_of_publication"
    PUBLISHER = "publisher"
    TITLE = "title"
    TYPE = "type"
    URL = "url"
    VOLUME = "volume"
