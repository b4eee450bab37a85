from __future__ import annotations

from shelfmark.domain.graph.fields import (
    MODULE_JSON,
    MODULE_LINKED_DATA,
    RESOURCE_JSON,
    RESOURCE_LINKED_DATA,
    TIME_PERIOD_JSON,
    merge_fields,
    read_fields,
)
from shelfmark.domain.properties import DEFAULT_EXTRACTOR
from tests.support.linked_data import linked_resource_record, module_record


def test_resource_json_fields() -> None:
    values = read_fields(
        RESOURCE_JSON,
        {
            "title": "Bleak <i>House</i>",
            "authors": ["Dickens, Charles", ""],
            "volume": 3,
            "onlineResource": "yes",
            "url": "http://example.org/?a=1&amp;b=2",
            "editionData": {"editions": [1, 2]},
        },
        DEFAULT_EXTRACTOR,
    )

    assert values["title"] == "Bleak House"
    assert values["authors"] == ("Dickens, Charles",)
    assert values["volume"] == "3"
    assert values["online_resource"] is True
    assert values["url"] == "http://example.org/?a=1&b=2"
    assert values["edition_data"] == {"editions": [1, 2]}
    assert values["isbns"] == ()
    assert values["doi"] is None


def test_resource_linked_data_fields_use_local_type_name() -> None:
    values = read_fields(
        RESOURCE_LINKED_DATA,
        linked_resource_record("Hard Times", resource_type="Book", doi="10.1/ht"),
        DEFAULT_EXTRACTOR,
    )

    assert values["title"] == "Hard Times"
    assert values["type"] == "Book"
    assert values["doi"] == "10.1/ht"


def test_time_period_active_is_optional_boolean() -> None:
    assert read_fields(TIME_PERIOD_JSON, {}, DEFAULT_EXTRACTOR)["active"] is None
    assert read_fields(TIME_PERIOD_JSON, {"active": False}, DEFAULT_EXTRACTOR)["active"] is False


def test_merge_prefers_primary_but_fills_gaps() -> None:
    linked_data = module_record("IGNORED", "Early Modern Europe")

    merged = merge_fields(
        read_fields(MODULE_JSON, {"code": "HIST101"}, DEFAULT_EXTRACTOR),
        read_fields(MODULE_LINKED_DATA, linked_data, DEFAULT_EXTRACTOR),
    )

    assert merged == {"code": "HIST101", "name": "Early Modern Europe"}
