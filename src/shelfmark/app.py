"""Application orchestration entry points."""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from shelfmark.adapters.aspire import AspireClient
from shelfmark.adapters.ldap import LdapDirectorySession
from shelfmark.config import (
    IdentityFilesConfig,
    get_aspire_config,
    get_directory_config,
    get_identity_files_config,
)
from shelfmark.domain.graph.factory import ObjectFactory
from shelfmark.domain.identity import EmailSelector, IdentityDirectory, UserLookup
from shelfmark.domain.model import ReadingList, UserMissPolicy

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from shelfmark.domain.ports.fetching import ReadingListSource

log = getLogger(__name__)


def build_object_factory(
    *,
    source: ReadingListSource,
    identity_files: IdentityFilesConfig | None = None,
    directory: IdentityDirectory | None = None,
    user_miss_policy: UserMissPolicy = UserMissPolicy.IGNORE,
    users_delimiter: str = "\t",
    users_skip_header: bool = False,
) -> ObjectFactory:
    """Assemble an object factory with its email rules, user profiles and directory."""

    files = identity_files or IdentityFilesConfig()
    email_selector = EmailSelector.from_files(files.email_rules_path, files.email_map_path)

    users = UserLookup(email_selector=email_selector, directory=directory)
    if files.users_path is not None:
        users.load(files.users_path, delimiter=users_delimiter, skip_header=users_skip_header)

    return ObjectFactory(
        source,
        email_selector=email_selector,
        directory=directory,
        users=users,
        user_miss_policy=user_miss_policy,
    )


@contextmanager
def open_object_factory_from_environment(
    *,
    use_directory: bool = True,
    user_miss_policy: UserMissPolicy = UserMissPolicy.IGNORE,
) -> Iterator[ObjectFactory]:
    """Yield a factory wired to the Aspire API and directory named in the environment.

    A `.env` file is loaded first. The API client and directory session are closed
    when the block exits.
    """

    load_dotenv()
    aspire_config = get_aspire_config()
    identity_files = get_identity_files_config()

    with ExitStack() as stack:
        client = stack.enter_context(AspireClient(aspire_config))
        directory = None
        if use_directory:
            directory_config = get_directory_config()
            directory = stack.enter_context(
                IdentityDirectory(
                    LdapDirectorySession(directory_config), use_cache=directory_config.use_cache
                )
            )
        yield build_object_factory(
            source=client,
            identity_files=identity_files,
            directory=directory,
            user_miss_policy=user_miss_policy,
        )


def resolve_reading_lists(factory: ObjectFactory, uris: Iterable[str]) -> Iterator[ReadingList]:
    """Resolve each list URI in turn, skipping those that are not reading lists."""

    resolved = 0
    for uri in uris:
        node = factory.resolve(uri)
        if not isinstance(node, ReadingList):
            log.warning("Skipping %s: not a reading list", uri)
            continue
        resolved += 1
        log.info(
            "Resolved reading list %s (%s): %d items",
            node.name or node.id,
            uri,
            node.length(),
        )
        yield node
    log.info("Finished resolving reading lists: resolved=%d", resolved)
