"""Building user profiles and the bulk-loaded user lookup."""

from __future__ import annotations

import csv
import re
from collections.abc import Mapping
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Any

from shelfmark.domain.model.user import User

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from shelfmark.domain.graph.factory import ObjectFactory
    from shelfmark.domain.identity.directory import IdentityDirectory
    from shelfmark.domain.identity.email import EmailSelector

log = getLogger(__name__)

_LIST_DELIMITER = re.compile(r"\s*;\s*")

# Columns of the Aspire "All User Profiles" report
FIRST_NAME_COLUMN = 0
SURNAME_COLUMN = 1
URI_COLUMN = 3
EMAIL_COLUMN = 4
ROLE_COLUMN = 7


def _strings(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        values: Sequence[Any] = _LIST_DELIMITER.split(value.strip())
    else:
        values = list(value)
    # ordered and de-duplicated
    return tuple(dict.fromkeys(str(v).strip() for v in values if v and str(v).strip()))


def build_user(
    uri: str,
    profile: Mapping[str, Any],
    *,
    email_selector: EmailSelector | None = None,
    directory: IdentityDirectory | None = None,
    factory: ObjectFactory | None = None,
) -> User:
    """Build a user from a profile record and resolve its institutional identity.

    The primary email and username are resolved here, once, rather than on access.
    """

    emails = _strings(profile.get("email"))
    primary_email = email_selector.select_primary(emails) if email_selector else None
    username = None
    if directory is not None and primary_email:
        username = directory.find_username(primary_email)
    return User(
        uri=uri,
        factory=factory,
        first_name=profile.get("firstName") or None,
        surname=profile.get("surname") or None,
        email=emails,
        role=_strings(profile.get("role")),
        primary_email=primary_email,
        username=username,
    )


class UserLookup(Mapping[str, User]):
    """User profiles indexed by URI, loaded in bulk from a tabular report extract."""

    def __init__(
        self,
        *,
        email_selector: EmailSelector | None = None,
        directory: IdentityDirectory | None = None,
    ) -> None:
        self.email_selector = email_selector
        self.directory = directory
        self._users: dict[str, User] = {}

    def __getitem__(self, uri: str) -> User:
        return self._users[uri]

    def __iter__(self) -> Iterator[str]:
        return iter(self._users)

    def __len__(self) -> int:
        return len(self._users)

    def add(self, user: User) -> None:
        self._users[user.uri] = user

    def load(
        self,
        path: str | Path,
        *,
        delimiter: str = "\t",
        skip_header: bool = False,
    ) -> int:
        """Add every user in the extract at `path` and return how many were loaded."""
        loaded = 0
        with Path(path).open(newline="", encoding="utf-8") as handle:
            for index, row in enumerate(csv.reader(handle, delimiter=delimiter)):
                if skip_header and index == 0:
                    continue
                user = self._user_from_row(row)
                if user is None:
                    continue
                self._users[user.uri] = user
                loaded += 1
        log.info("Loaded %d user profiles from %s", loaded, path)
        return loaded

    def _user_from_row(self, row: Sequence[str]) -> User | None:
        uri = _column(row, URI_COLUMN)
        if not uri:
            return None
        profile = {
            "firstName": _column(row, FIRST_NAME_COLUMN),
            "surname": _column(row, SURNAME_COLUMN),
            "email": _column(row, EMAIL_COLUMN),
            "role": _column(row, ROLE_COLUMN),
        }
        return build_user(
            uri, profile, email_selector=self.email_selector, directory=self.directory
        )


def _column(row: Sequence[str], index: int) -> str | None:
    if index >= len(row):
        return None
    value = row[index].strip()
    return value or None
