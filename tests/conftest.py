from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from shelfmark.domain.identity import EmailSelector, IdentityDirectory
from tests.support.identity import EMAIL_RULES
from tests.support.sources import FakeDirectorySession

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def email_rules_file(tmp_path: Path) -> Path:
    path = tmp_path / "email.conf"
    path.write_text(EMAIL_RULES, encoding="utf-8")
    return path


@pytest.fixture
def email_selector(email_rules_file: Path) -> EmailSelector:
    return EmailSelector.from_files(email_rules_file)


@pytest.fixture
def directory_session() -> FakeDirectorySession:
    return FakeDirectorySession(
        {
            ("mail", "a@lancaster.ac.uk"): [["axxx1"]],
            ("mail", "b.sheep@lancaster.ac.uk"): [["sheepb"]],
        }
    )


@pytest.fixture
def identity_directory(directory_session: FakeDirectorySession) -> IdentityDirectory:
    return IdentityDirectory(directory_session, use_cache=True)
