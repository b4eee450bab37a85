"""Public domain model surface."""

from __future__ import annotations

from shelfmark.domain.model.base import Node
from shelfmark.domain.model.enums import (
    CitationField,
    LengthMode,
    NodeKind,
    TitleAlternative,
    UserMissPolicy,
)
from shelfmark.domain.model.listing import Item, ListObject, ReadingList, Section
from shelfmark.domain.model.reference import Digitisation, Module, TimePeriod
from shelfmark.domain.model.resource import Resource
from shelfmark.domain.model.user import User

__all__ = [  # noqa: RUF022
    # base
    "Node",
    # enums
    "CitationField",
    "LengthMode",
    "NodeKind",
    "TitleAlternative",
    "UserMissPolicy",
    # reading list structure
    "ListObject",
    "ReadingList",
    "Section",
    "Item",
    # bibliographic
    "Resource",
    # references
    "Digitisation",
    "Module",
    "TimePeriod",
    "User",
]
