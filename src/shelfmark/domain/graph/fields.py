"""Property tables mapping source records onto node attributes.

REST records use plain JSON keys. Linked-data records are keyed by predicate URI and
hold lists of `{"type": ..., "value": ...}` pairs. References to other nodes (users,
modules, children, parent resources) are resolved by the factory, not listed here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from shelfmark.domain.properties import PropertyExtractor

SIOC = "http://rdfs.org/sioc/spec/"
RESOURCE_LIST = "http://purl.org/vocab/resourcelist/schema#"
AIISO = "http://purl.org/vocab/aiiso/schema#"
BIBO = "http://purl.org/ontology/bibo/"
DCTERMS = "http://purl.org/dc/terms/"
TALIS_BIBLIOGRAPHIC = "http://lists.talis.com/schema/bibliographic#"
RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"

# reference predicates of a list
LIST_CREATOR = f"{SIOC}has_creator"
LIST_OWNER = f"{RESOURCE_LIST}hasOwner"
LIST_PUBLISHER = f"{RESOURCE_LIST}publishedBy"
LIST_USED_BY = f"{RESOURCE_LIST}usedBy"

# reference predicates of a resource
RESOURCE_IS_PART_OF = f"{DCTERMS}isPartOf"
RESOURCE_HAS_PART = f"{DCTERMS}hasPart"


class ValueKind(StrEnum):
    TEXT = "text"
    TEXT_LIST = "text_list"
    URL = "url"
    DATE = "date"
    # always a bool, False when missing
    FLAG = "flag"
    # a bool, or None when missing
    BOOLEAN = "boolean"
    # stored as-is without normalisation
    RAW = "raw"
    # local name of a type URI ("http://purl.org/ontology/bibo/Book" -> "Book")
    TYPE_NAME = "type_name"


@dataclass(frozen=True, slots=True)
class FieldMapping:
    attribute: str
    key: str
    kind: ValueKind = ValueKind.TEXT


LIST_LINKED_DATA: tuple[FieldMapping, ...] = (
    FieldMapping("name", f"{SIOC}name"),
    FieldMapping("description", f"{RESOURCE_LIST}description"),
    FieldMapping("created", f"{RESOURCE_LIST}created", ValueKind.DATE),
    FieldMapping("last_published", f"{RESOURCE_LIST}lastPublished", ValueKind.DATE),
    FieldMapping("last_updated", f"{RESOURCE_LIST}lastUpdated", ValueKind.DATE),
)

SECTION_LINKED_DATA: tuple[FieldMapping, ...] = (
    FieldMapping("name", f"{SIOC}name"),
    FieldMapping("description", f"{RESOURCE_LIST}description"),
)

MODULE_JSON: tuple[FieldMapping, ...] = (
    FieldMapping("code", "code"),
    FieldMapping("name", "name"),
)

MODULE_LINKED_DATA: tuple[FieldMapping, ...] = (
    FieldMapping("code", f"{AIISO}code"),
    FieldMapping("name", f"{AIISO}name"),
)

TIME_PERIOD_JSON: tuple[FieldMapping, ...] = (
    FieldMapping("title", "title"),
    FieldMapping("start_date", "startDate", ValueKind.DATE),
    FieldMapping("end_date", "endDate", ValueKind.DATE),
    FieldMapping("active", "active", ValueKind.BOOLEAN),
)

ITEM_JSON: tuple[FieldMapping, ...] = (
    FieldMapping("title", "title"),
    FieldMapping("importance", "importance"),
    FieldMapping("library_note", "libraryNote"),
    FieldMapping("student_note", "studentNote"),
    FieldMapping("note", "note"),
    FieldMapping("local_control_number", "lcn"),
)

DIGITISATION_JSON: tuple[FieldMapping, ...] = (
    FieldMapping("bundle_id", "bundleId"),
    FieldMapping("request_id", "requestId"),
    FieldMapping("request_status", "requestStatus"),
)

RESOURCE_JSON: tuple[FieldMapping, ...] = (
    FieldMapping("authors", "authors", ValueKind.TEXT_LIST),
    FieldMapping("book_jacket_url", "bookjacketURL", ValueKind.URL),
    FieldMapping("date", "date"),
    FieldMapping("doi", "doi"),
    FieldMapping("edition", "edition"),
    FieldMapping("edition_data", "editionData", ValueKind.RAW),
    FieldMapping("eissn", "eissn"),
    FieldMapping("isbn10", "isbn10"),
    FieldMapping("isbn13", "isbn13"),
    FieldMapping("isbns", "isbns", ValueKind.TEXT_LIST),
    FieldMapping("issn", "issn"),
    FieldMapping("issue", "issue"),
    FieldMapping("issued", "issued", ValueKind.RAW),
    FieldMapping("latest_edition", "latestEdition", ValueKind.RAW),
    FieldMapping("local_control_number", "lcn"),
    FieldMapping("online_resource", "onlineResource", ValueKind.FLAG),
    FieldMapping("page", "page"),
    FieldMapping("page_end", "pageEnd"),
    FieldMapping("page_start", "pageStart"),
    FieldMapping("place_of_publication", "placeOfPublication"),
    FieldMapping("publisher", "publisher"),
    FieldMapping("title", "title"),
    FieldMapping("type", "type"),
    FieldMapping("url", "url", ValueKind.URL),
    FieldMapping("volume", "volume"),
)

RESOURCE_LINKED_DATA: tuple[FieldMapping, ...] = (
    FieldMapping("title", f"{DCTERMS}title"),
    FieldMapping("date", f"{DCTERMS}date"),
    FieldMapping("doi", f"{BIBO}doi"),
    FieldMapping("edition", f"{BIBO}edition"),
    FieldMapping("eissn", f"{BIBO}eissn"),
    FieldMapping("isbn10", f"{BIBO}isbn10"),
    FieldMapping("isbn13", f"{BIBO}isbn13"),
    FieldMapping("issn", f"{BIBO}issn"),
    FieldMapping("issue", f"{BIBO}issue"),
    FieldMapping("local_control_number", f"{TALIS_BIBLIOGRAPHIC}localControlNumber"),
    FieldMapping("page", f"{BIBO}pages"),
    FieldMapping("page_end", f"{BIBO}pageEnd"),
    FieldMapping("page_start", f"{BIBO}pageStart"),
    FieldMapping("type", RDF_TYPE, ValueKind.TYPE_NAME),
    FieldMapping("volume", f"{BIBO}volume"),
)


def read_fields(
    mappings: Sequence[FieldMapping],
    record: Mapping[str, Any] | None,
    extractor: PropertyExtractor,
) -> dict[str, Any]:
    """Return `{attribute: value}` for every mapping, with absent values as None."""
    return {mapping.attribute: read_field(mapping, record, extractor) for mapping in mappings}


def read_field(
    mapping: FieldMapping,
    record: Mapping[str, Any] | None,
    extractor: PropertyExtractor,
) -> Any:
    key = mapping.key
    match mapping.kind:
        case ValueKind.TEXT:
            return _text(extractor.extract(key, record))
        case ValueKind.TEXT_LIST:
            return tuple(_text(value) for value in extractor.extract_all(key, record))
        case ValueKind.URL:
            return extractor.extract(key, record, is_url=True)
        case ValueKind.DATE:
            return extractor.extract_date(key, record)
        case ValueKind.FLAG:
            return extractor.extract_flag(key, record)
        case ValueKind.BOOLEAN:
            value = extractor.extract(key, record)
            return None if value is None else bool(value)
        case ValueKind.RAW:
            return record.get(key) if record else None
        case ValueKind.TYPE_NAME:
            return _local_name(extractor.extract(key, record, is_url=True))


def merge_fields(primary: Mapping[str, Any], fallback: Mapping[str, Any]) -> dict[str, Any]:
    """Prefer values from `primary`, falling back per attribute when they are empty."""
    merged = dict(fallback)
    for attribute, value in primary.items():
        if (value is not None and value != "") or attribute not in merged:
            merged[attribute] = value
    return merged


def _text(value: Any) -> Any:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    if value == "":
        return None
    return value


def _local_name(uri: object) -> str | None:
    if not isinstance(uri, str) or not uri:
        return None
    for separator in ("#", "/"):
        if separator in uri:
            uri = uri.rsplit(separator, 1)[1]
    return uri or None
