"""Small reference entities hanging off reading lists and items."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from shelfmark.domain.model.base import Node
from shelfmark.domain.model.enums import NodeKind

if TYPE_CHECKING:
    from datetime import datetime

_LEADING_YEAR = re.compile(r"^\s*(\d+)")


@dataclass(eq=False, kw_only=True)
class Module(Node):
    KIND: ClassVar[NodeKind] = NodeKind.MODULE

    code: str | None = None
    name: str | None = None

    def __str__(self) -> str:
        return self.name or self.code or super().__str__()


@dataclass(eq=False, kw_only=True)
class TimePeriod(Node):
    """The period covered by a reading list, e.g. the academic year "2016-17"."""

    KIND: ClassVar[NodeKind] = NodeKind.TIME_PERIOD

    title: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    active: bool | None = None

    @property
    def year(self) -> int | None:
        """The leading year of the title ("2016-17" -> 2016), or None if unparseable."""
        if not self.title:
            return None
        match = _LEADING_YEAR.match(self.title)
        return int(match.group(1)) if match else None

    def __str__(self) -> str:
        return self.title or ""


@dataclass(frozen=True, slots=True)
class Digitisation:
    """Digitisation request attached to a list item."""

    bundle_id: str | None = None
    request_id: str | None = None
    request_status: str | None = None

    def __str__(self) -> str:
        return self.request_id or ""
