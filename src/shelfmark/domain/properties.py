"""Normalisation of raw property values from the REST and linked-data sources.

Both sources are read through `PropertyExtractor.extract`. A stored value may be a
scalar, a list, or a linked-data `{"type": ..., "value": ...}` pair. Free text has its
markup stripped and whitespace collapsed. URLs only have HTML entities decoded, since
some arrive partially escaped. Missing keys never raise: they come back as `None`,
or as `[]` when several values were asked for.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from logging import getLogger
from typing import Any

from bs4 import BeautifulSoup

log = getLogger(__name__)

Transform = Callable[[Any, str | None], Any]

_WHITESPACE = re.compile(r"\s+")

# Elements whose boundaries become line breaks (and so single spaces) when stripped.
BLOCK_TAGS: tuple[str, ...] = (
    "address",
    "article",
    "aside",
    "blockquote",
    "br",
    "dd",
    "div",
    "dl",
    "dt",
    "figcaption",
    "figure",
    "footer",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hr",
    "li",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "td",
    "th",
    "tr",
    "ul",
)


def strip_markup(value: str) -> str:
    """Return the text of an HTML fragment with whitespace collapsed to single spaces."""

    soup = BeautifulSoup(value, "html.parser")
    for tag in soup.find_all(list(BLOCK_TAGS)):
        tag.insert_before("\n")
        tag.insert_after("\n")
    # the parser decodes entities once; double-escaped input still has some left
    text = html.unescape(soup.get_text())
    return _WHITESPACE.sub(" ", text).strip()


def unescape_url(value: str) -> str:
    return html.unescape(value)


def parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        log.debug("Ignoring unparseable timestamp %r", value)
        return None


@dataclass(frozen=True, slots=True)
class PropertyExtractor:
    """Reads and normalises named properties from a source record."""

    strip_markup: bool = True

    def extract(
        self,
        name: str,
        record: Mapping[str, Any] | None,
        *,
        single: bool = True,
        is_url: bool = False,
        transform: Transform | None = None,
    ) -> Any:
        values = record.get(name) if record else None
        if values is None:
            return None if single else []
        if isinstance(values, list | tuple):
            converted = [
                self._convert(value, is_url=is_url, transform=transform) for value in values
            ]
            if single:
                return converted[0] if converted else None
            return converted
        value = self._convert(values, is_url=is_url, transform=transform)
        return value if single else [value]

    def extract_date(
        self, name: str, record: Mapping[str, Any] | None
    ) -> datetime | None:
        return self.extract(name, record, transform=lambda value, _type: parse_timestamp(value))

    def extract_flag(self, name: str, record: Mapping[str, Any] | None) -> bool:
        return bool(self.extract(name, record))

    def extract_all(
        self, name: str, record: Mapping[str, Any] | None, *, is_url: bool = False
    ) -> tuple[Any, ...]:
        """Return every non-empty value of a multi-valued property."""
        values = self.extract(name, record, single=False, is_url=is_url)
        return tuple(value for value in values if value is not None and value != "")

    def transform_text(self, value: str, *, is_url: bool = False) -> str:
        if is_url:
            return unescape_url(value)
        if self.strip_markup:
            return strip_markup(value)
        return value

    def _convert(self, value: Any, *, is_url: bool, transform: Transform | None) -> Any:
        value_type: str | None = None
        if isinstance(value, Mapping):
            value_type = value.get("type")
            value = value.get("value")
        if isinstance(value, str):
            value = self.transform_text(value, is_url=is_url)
        if transform is None or value is None:
            return value
        return transform(value, value_type)


DEFAULT_EXTRACTOR = PropertyExtractor()
