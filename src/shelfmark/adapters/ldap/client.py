"""ldap3-backed directory session."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from ldap3 import SUBTREE, Connection, Server
from ldap3.utils.conv import escape_filter_chars

if TYPE_CHECKING:
    from shelfmark.config.directory import DirectoryConfig

log = getLogger(__name__)

UID_ATTRIBUTE = "uid"


class LdapDirectorySession:
    """A bound LDAP connection searching one subtree for user ids.

    The connection is bound once, when the session is created, and unbound by
    `close()`.
    """

    def __init__(self, config: DirectoryConfig, *, connection: Connection | None = None) -> None:
        self.base = config.base
        if connection is None:
            server = Server(config.host, port=config.port)
            log.debug(
                "Binding to LDAP server %s:%s as %s", config.host, config.port, config.bind_user
            )
            connection = Connection(
                server,
                user=config.bind_user,
                password=config.bind_password,
                auto_bind=True,
            )
        self._connection = connection

    def search_uids(self, attribute: str, value: str) -> list[list[str]]:
        search_filter = f"({attribute}={escape_filter_chars(value)})"
        self._connection.search(
            self.base, search_filter, search_scope=SUBTREE, attributes=[UID_ATTRIBUTE]
        )
        results: list[list[str]] = []
        for entry in self._connection.response or ():
            if entry.get("type") != "searchResEntry":
                continue
            uids = entry.get("attributes", {}).get(UID_ATTRIBUTE) or []
            if isinstance(uids, str):
                uids = [uids]
            results.append([str(uid) for uid in uids])
        return results

    def close(self) -> None:
        self._connection.unbind()
