from __future__ import annotations

from datetime import UTC, datetime

from shelfmark.domain.properties import (
    DEFAULT_EXTRACTOR,
    PropertyExtractor,
    parse_timestamp,
    strip_markup,
)


def test_strip_markup_collapses_blocks_and_decodes_entities() -> None:
    assert strip_markup("<p>Hello &amp; welcome</p>\n<p>Back</p>") == "Hello & welcome Back"


def test_strip_markup_keeps_block_boundaries_as_spaces() -> None:
    assert strip_markup("<div>one</div><div>two<br>three</div>") == "one two three"


def test_strip_markup_decodes_double_escaped_entities() -> None:
    assert strip_markup("Fish &amp;amp; chips") == "Fish & chips"


def test_extract_missing_values_degrade_quietly() -> None:
    assert DEFAULT_EXTRACTOR.extract("title", None) is None
    assert DEFAULT_EXTRACTOR.extract("title", {}) is None
    assert DEFAULT_EXTRACTOR.extract("authors", {}, single=False) == []


def test_extract_returns_first_of_sequence_when_single() -> None:
    record = {"authors": ["<i>Smith</i>, J.", "Jones, K."]}

    assert DEFAULT_EXTRACTOR.extract("authors", record) == "Smith, J."
    assert DEFAULT_EXTRACTOR.extract("authors", record, single=False) == [
        "Smith, J.",
        "Jones, K.",
    ]


def test_extract_wraps_scalar_when_multiple_requested() -> None:
    assert DEFAULT_EXTRACTOR.extract("title", {"title": "Dune"}, single=False) == ["Dune"]


def test_extract_unwraps_typed_pairs_and_passes_type_to_transform() -> None:
    record = {"p": [{"type": "literal", "value": " 42 "}]}
    seen: list[str | None] = []

    def to_int(value: str, value_type: str | None) -> int:
        seen.append(value_type)
        return int(value)

    assert DEFAULT_EXTRACTOR.extract("p", record, transform=to_int) == 42
    assert seen == ["literal"]


def test_extract_url_only_decodes_entities() -> None:
    record = {"url": "http://example.org/find?a=1&amp;b=<2>"}

    assert DEFAULT_EXTRACTOR.extract("url", record, is_url=True) == (
        "http://example.org/find?a=1&b=<2>"
    )


def test_extractor_without_markup_stripping_returns_text_unchanged() -> None:
    extractor = PropertyExtractor(strip_markup=False)

    assert extractor.extract("note", {"note": "<b>bold</b>  text"}) == "<b>bold</b>  text"


def test_extract_date_and_flag() -> None:
    record = {"created": [{"type": "literal", "value": "2016-08-01T09:30:00Z"}], "active": 1}

    assert DEFAULT_EXTRACTOR.extract_date("created", record) == datetime(
        2016, 8, 1, 9, 30, tzinfo=UTC
    )
    assert DEFAULT_EXTRACTOR.extract_flag("active", record) is True
    assert DEFAULT_EXTRACTOR.extract_flag("missing", record) is False


def test_extract_all_drops_blank_values() -> None:
    record = {"isbns": ["9780141439518", "", None, "0141439513"]}

    assert DEFAULT_EXTRACTOR.extract_all("isbns", record) == ("9780141439518", "0141439513")


def test_parse_timestamp_rejects_garbage() -> None:
    assert parse_timestamp("not a date") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None
