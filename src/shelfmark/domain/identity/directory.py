"""Resolve institutional email addresses to directory usernames."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import TracebackType

    from shelfmark.domain.ports.directory import DirectorySession

log = getLogger(__name__)


class IdentityDirectory:
    """Finds the username for an email address, optionally caching successful lookups.

    The session is opened by the caller and closed through `close()`. It is never
    reopened here, so a dropped connection surfaces as an error from the session.
    """

    def __init__(self, session: DirectorySession, *, use_cache: bool = False) -> None:
        self.session = session
        self.use_cache = use_cache
        self.cache: dict[str, str] = {}

    def __enter__(self) -> IdentityDirectory:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def clear(self) -> None:
        self.cache.clear()

    def close(self) -> None:
        self.session.close()

    def find_username(self, email: str | None) -> str | None:
        if not email:
            return None

        if self.use_cache:
            cached = self.cache.get(email)
            if cached:
                return cached

        uid = _first_uid(self.session.search_uids("mail", email))

        # Fall back to "username@domain" when the local part looks like a bare username
        # (usernames contain no punctuation, "first.last" addresses do).
        if uid is None:
            local_part = email.partition("@")[0]
            if local_part and "." not in local_part:
                uid = _first_uid(self.session.search_uids("uid", local_part))

        if uid is None:
            log.debug("No directory entry for %s", email)
            return None

        if self.use_cache:
            self.cache[email] = uid
        return uid


def _first_uid(entries: Iterable[Sequence[str]]) -> str | None:
    for uids in entries:
        # the first uid value is the canonical username
        if uids and uids[0]:
            return uids[0]
    return None
