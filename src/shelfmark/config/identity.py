"""Locations of the tabular identity inputs (email rules, email map, user extract)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import optional_env_var


@dataclass(frozen=True, slots=True)
class IdentityFilesConfig:
    email_rules_path: Path | None = None
    email_map_path: Path | None = None
    users_path: Path | None = None


def _optional_path(name: str) -> Path | None:
    value = optional_env_var(name)
    return Path(value).expanduser() if value else None


def get_identity_files_config() -> IdentityFilesConfig:
    return IdentityFilesConfig(
        email_rules_path=_optional_path("EMAIL_CONF"),
        email_map_path=_optional_path("EMAIL_MAP"),
        users_path=_optional_path("ASPIRE_USERS"),
    )
