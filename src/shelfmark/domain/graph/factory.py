"""Resolution of Aspire URIs into the reading list object graph.

The factory dispatches on URI shape (see `classify`), pulls REST JSON and linked data
from a `ReadingListSource` as needed, and wires parents, children and references
together. Each node is fully built, children included, before it is returned.
"""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Any

from shelfmark.domain.errors import CyclicReferenceError
from shelfmark.domain.graph import fields
from shelfmark.domain.graph.classify import match_uri
from shelfmark.domain.identity.users import build_user
from shelfmark.domain.model.enums import NodeKind, UserMissPolicy
from shelfmark.domain.model.listing import Item, ListObject, ReadingList, Section
from shelfmark.domain.model.reference import Digitisation, Module, TimePeriod
from shelfmark.domain.model.resource import Resource
from shelfmark.domain.model.user import User
from shelfmark.domain.properties import DEFAULT_EXTRACTOR, PropertyExtractor
from shelfmark.domain.uris import SEQUENCE_PREFIX, id_from_uri, sequence_position

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shelfmark.domain.identity.directory import IdentityDirectory
    from shelfmark.domain.identity.email import EmailSelector
    from shelfmark.domain.model.base import Node
    from shelfmark.domain.ports.fetching import LinkedDataBundle, ReadingListSource

log = getLogger(__name__)

# Query parameters for the list details API: include drafts, book jackets and
# editions, but not the change history (fetched separately).
LIST_DETAILS_PARAMS: dict[str, int] = {"bookjacket": 1, "draft": 1, "editions": 1, "history": 0}

_SEQUENCE_KEY_PREFIX = f"{SEQUENCE_PREFIX}_"

# Larger sequence positions are logged and skipped as corrupt.
MAX_SEQUENCE_POSITION = 10_000


class ObjectFactory:
    """Builds reading list objects from their URIs.

    User profiles are cached by URI. The cache may be seeded from a `UserLookup`;
    what happens on a miss is governed by `user_miss_policy`.
    """

    def __init__(
        self,
        source: ReadingListSource,
        *,
        email_selector: EmailSelector | None = None,
        directory: IdentityDirectory | None = None,
        users: Mapping[str, User] | None = None,
        user_miss_policy: UserMissPolicy = UserMissPolicy.IGNORE,
        extractor: PropertyExtractor = DEFAULT_EXTRACTOR,
    ) -> None:
        self.source = source
        self.email_selector = email_selector
        self.directory = directory
        self.users: dict[str, User] = dict(users or {})
        self.user_miss_policy = UserMissPolicy(user_miss_policy)
        self.extractor = extractor
        # URIs of resources currently being built
        self._resolving: set[str] = set()

    def resolve(
        self,
        uri: str | None,
        parent: ListObject | None = None,
        *,
        json: Mapping[str, Any] | None = None,
        linked_data: LinkedDataBundle | None = None,
    ) -> Node | None:
        """Return the object identified by `uri`, or None if its kind is unknown.

        `json` is the object's REST representation, when the caller already has it.
        `linked_data` is a bundle that may already describe the object; it is fetched
        when it does not.
        """

        if not uri:
            return None

        rule = match_uri(uri, has_json=json is not None)
        if rule is None:
            log.debug("Ignoring unrecognised URI %s", uri)
            return None

        if not rule.linked_data:
            match rule.kind:
                case NodeKind.ITEM:
                    return self._build_item(uri, parent, json)
                case NodeKind.RESOURCE:
                    return self._build_resource(uri, json=json)
                case _:
                    return self.resolve_user(uri)

        bundle = self._linked_data_for(uri, linked_data)
        match rule.kind:
            case NodeKind.LIST:
                return self._build_list(uri, parent, json, bundle)
            case NodeKind.MODULE:
                return self._build_module(uri, json, bundle.get(uri))
            case NodeKind.SECTION:
                return self._build_section(uri, parent, bundle)
            case _:
                return self._build_resource(uri, linked_data=bundle)

    def resolve_user(self, uri: str | None) -> User | None:
        if not uri:
            return None

        user = self.users.get(uri)
        if user is not None:
            return user

        if self.user_miss_policy is UserMissPolicy.IGNORE:
            log.debug("User %s is not in the user cache", uri)
            return None

        user_id = id_from_uri(uri)
        if not user_id:
            return None
        log.debug("Fetching user profile %s", user_id)
        profile = self.source.fetch_user_profile(user_id)
        if not profile:
            return None

        user = build_user(
            uri,
            profile,
            email_selector=self.email_selector,
            directory=self.directory,
            factory=self,
        )
        self.users[uri] = user
        return user

    # Lists, sections and items

    def _build_list(
        self,
        uri: str,
        parent: ListObject | None,
        json: Mapping[str, Any] | None,
        bundle: LinkedDataBundle,
    ) -> ReadingList:
        _check_ancestry(uri, parent)
        log.info("Resolving reading list %s", uri)

        list_id = id_from_uri(uri)
        history = None
        if list_id:
            if json is None:
                log.debug("Fetching list details for %s", list_id)
                json = self.source.fetch_list_details(list_id, **LIST_DETAILS_PARAMS)
            log.debug("Fetching list history for %s", list_id)
            history = self.source.fetch_list_history(list_id)

        record = bundle.get(uri)
        values = fields.read_fields(fields.LIST_LINKED_DATA, record, self.extractor)
        # the REST name takes precedence over the linked-data name
        linked_data_name = values.pop("name")
        name = self.extractor.extract("name", json) or linked_data_name

        reading_list = ReadingList(
            uri=uri,
            factory=self,
            name=name,
            owner=self._users_for(fields.LIST_OWNER, record, bundle),
            creator=self._users_for(fields.LIST_CREATOR, record, bundle),
            publisher=self._user_for(fields.LIST_PUBLISHER, record, bundle),
            modules=self._list_modules(json, record, bundle),
            time_period=self._time_period(json.get("timePeriod") if json else None),
            items=_item_records(json),
            list_history=history,
            **values,
        )
        reading_list.attach_parent(parent)
        # items look up their REST data in the list, so entries come last
        reading_list.set_entries(self._entries(reading_list, bundle))
        return reading_list

    def _build_section(
        self, uri: str, parent: ListObject | None, bundle: LinkedDataBundle
    ) -> Section:
        _check_ancestry(uri, parent)
        values = fields.read_fields(fields.SECTION_LINKED_DATA, bundle.get(uri), self.extractor)
        section = Section(uri=uri, factory=self, **values)
        section.attach_parent(parent)
        section.set_entries(self._entries(section, bundle))
        return section

    def _build_item(
        self, uri: str, parent: ListObject | None, json: Mapping[str, Any] | None
    ) -> Item:
        _check_ancestry(uri, parent)
        if json is None:
            owner = _owning_list(parent)
            json = owner.item_record(uri) if owner is not None else None
            if json is None:
                log.debug("No list details for item %s", uri)

        values = fields.read_fields(fields.ITEM_JSON, json, self.extractor)
        item = Item(
            uri=uri,
            factory=self,
            resource=self._item_resource(uri, json.get("resource") if json else None),
            digitisation=self._digitisation(json.get("digitisation") if json else None),
            **values,
        )
        item.attach_parent(parent)
        return item

    def _entries(
        self, owner: ListObject, bundle: LinkedDataBundle
    ) -> list[ListObject | None]:
        """Resolve the ordered children of `owner`, leaving None at missing positions."""
        record = bundle.get(owner.uri) or {}
        children: dict[int, str] = {}
        for key in record:
            if not key.startswith(_SEQUENCE_KEY_PREFIX):
                continue
            position = sequence_position(key)
            if position is None:
                log.warning("Ignoring invalid sequence key %s in %s", key, owner.uri)
                continue
            if position > MAX_SEQUENCE_POSITION:
                log.warning(
                    "Ignoring sequence key %s in %s beyond position %d",
                    key,
                    owner.uri,
                    MAX_SEQUENCE_POSITION,
                )
                continue
            child_uri = self.extractor.extract(key, record, is_url=True)
            if child_uri:
                children[position] = child_uri

        entries: list[ListObject | None] = [None] * max(children, default=0)
        for position in sorted(children):
            child = self.resolve(children[position], owner, linked_data=bundle)
            if child is not None and not isinstance(child, ListObject):
                log.warning("Ignoring non-list entry %s in %s", children[position], owner.uri)
                continue
            entries[position - 1] = child
        return entries

    # References

    def _list_modules(
        self,
        json: Mapping[str, Any] | None,
        record: Mapping[str, Any] | None,
        bundle: LinkedDataBundle,
    ) -> tuple[Module, ...]:
        modules_json = json.get("modules") if json else None
        if modules_json is not None:
            return tuple(
                self._build_module(module.get("uri") or "", module, None)
                for module in modules_json
                if isinstance(module, Mapping)
            )
        module_uris = self.extractor.extract(
            fields.LIST_USED_BY, record, single=False, is_url=True
        )
        modules = (self.resolve(module_uri, linked_data=bundle) for module_uri in module_uris)
        return tuple(module for module in modules if isinstance(module, Module))

    def _build_module(
        self,
        uri: str,
        json: Mapping[str, Any] | None,
        record: Mapping[str, Any] | None,
    ) -> Module:
        values = fields.merge_fields(
            fields.read_fields(fields.MODULE_JSON, json, self.extractor),
            fields.read_fields(fields.MODULE_LINKED_DATA, record, self.extractor),
        )
        return Module(uri=uri, factory=self, **values)

    def _time_period(self, period: Any) -> TimePeriod | None:
        if not isinstance(period, Mapping):
            return None
        values = fields.read_fields(fields.TIME_PERIOD_JSON, period, self.extractor)
        return TimePeriod(uri=period.get("uri") or "", factory=self, **values)

    def _digitisation(self, digitisation: Any) -> Digitisation | None:
        if not isinstance(digitisation, Mapping):
            return None
        return Digitisation(
            **fields.read_fields(fields.DIGITISATION_JSON, digitisation, self.extractor)
        )

    def _users_for(
        self, key: str, record: Mapping[str, Any] | None, bundle: LinkedDataBundle
    ) -> tuple[User, ...]:
        uris = self.extractor.extract(key, record, single=False, is_url=True)
        users = (self.resolve(uri, linked_data=bundle) for uri in uris)
        return tuple(user for user in users if isinstance(user, User))

    def _user_for(
        self, key: str, record: Mapping[str, Any] | None, bundle: LinkedDataBundle
    ) -> User | None:
        user = self.resolve(self.extractor.extract(key, record, is_url=True), linked_data=bundle)
        return user if isinstance(user, User) else None

    # Resources

    def _item_resource(self, item_uri: str, resource_json: Any) -> Resource | None:
        if isinstance(resource_json, list) and len(resource_json) > 1:
            log.warning("Item %s has %d resources, using the first", item_uri, len(resource_json))
        return self._nested_resource(resource_json)

    def _nested_resource(
        self, resource_json: Any, *, follow_links: bool = True
    ) -> Resource | None:
        if isinstance(resource_json, list):
            resource_json = resource_json[0] if resource_json else None
        if not isinstance(resource_json, Mapping):
            return None
        return self._build_resource(
            resource_json.get("uri") or "", json=resource_json, follow_links=follow_links
        )

    def _build_resource(
        self,
        uri: str,
        *,
        json: Mapping[str, Any] | None = None,
        linked_data: LinkedDataBundle | None = None,
        follow_links: bool = True,
    ) -> Resource:
        # nested JSON is finite; only a followed linked-data chain can loop
        guarded = bool(uri) and follow_links and json is None
        if guarded and uri in self._resolving:
            raise CyclicReferenceError(f"Cyclic resource reference at {uri}", uri=uri)
        if guarded:
            self._resolving.add(uri)
        try:
            is_part_of = has_part = None
            if json is not None:
                values = fields.read_fields(fields.RESOURCE_JSON, json, self.extractor)
                if follow_links:
                    is_part_of = self._nested_resource(json.get("isPartOf"))
                    has_part = self._nested_resource(json.get("hasPart"), follow_links=False)
            else:
                record = linked_data.get(uri) if linked_data else None
                values = fields.read_fields(fields.RESOURCE_LINKED_DATA, record, self.extractor)
                if follow_links:
                    is_part_of = self._linked_resource(
                        fields.RESOURCE_IS_PART_OF, record, linked_data, follow_links=True
                    )
                    # parts commonly point back at their container, so stop there
                    has_part = self._linked_resource(
                        fields.RESOURCE_HAS_PART, record, linked_data, follow_links=False
                    )
            return Resource(
                uri=uri, factory=self, is_part_of=is_part_of, has_part=has_part, **values
            )
        finally:
            if guarded:
                self._resolving.discard(uri)

    def _linked_resource(
        self,
        key: str,
        record: Mapping[str, Any] | None,
        linked_data: LinkedDataBundle | None,
        *,
        follow_links: bool,
    ) -> Resource | None:
        uri = self.extractor.extract(key, record, is_url=True)
        if not uri:
            return None
        bundle = self._linked_data_for(uri, linked_data)
        return self._build_resource(uri, linked_data=bundle, follow_links=follow_links)

    def _linked_data_for(
        self, uri: str, linked_data: LinkedDataBundle | None
    ) -> LinkedDataBundle:
        if linked_data is not None and uri in linked_data:
            return linked_data
        log.debug("Fetching linked data for %s", uri)
        return self.source.fetch_linked_data(uri)


def _check_ancestry(uri: str, parent: ListObject | None) -> None:
    if parent is None:
        return
    for node in (parent, *parent.ancestors()):
        if node.uri == uri:
            raise CyclicReferenceError(f"{uri} contains itself", uri=uri)


def _owning_list(parent: ListObject | None) -> ReadingList | None:
    if parent is None or isinstance(parent, ReadingList):
        return parent
    return parent.parent_list


def _item_records(json: Mapping[str, Any] | None) -> dict[str, Mapping[str, Any]]:
    items: Iterable[Any] = (json.get("items") if json else None) or ()
    return {
        item["uri"]: item
        for item in items
        if isinstance(item, Mapping) and item.get("uri")
    }
