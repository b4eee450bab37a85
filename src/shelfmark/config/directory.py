"""Institutional directory (LDAP) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_bool_env_var, optional_int_env_var, require_env_vars

DEFAULT_LDAP_PORT = 389


@dataclass(frozen=True, slots=True)
class DirectoryConfig:
    host: str
    bind_user: str
    bind_password: str
    base: str
    port: int = DEFAULT_LDAP_PORT
    use_cache: bool = False


def get_directory_config() -> DirectoryConfig:
    values = require_env_vars(("LDAP_HOST", "LDAP_USER", "LDAP_PASSWORD", "LDAP_BASE"))
    return DirectoryConfig(
        host=values["LDAP_HOST"],
        bind_user=values["LDAP_USER"],
        bind_password=values["LDAP_PASSWORD"],
        base=values["LDAP_BASE"],
        port=optional_int_env_var("LDAP_PORT", DEFAULT_LDAP_PORT),
        use_cache=optional_bool_env_var("LDAP_USE_CACHE"),
    )
