"""Talis Aspire API configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_env_var, optional_float_env_var, optional_int_env_var, require_env_vars
from .http import HttpClientConfig

DEFAULT_ASPIRE_API_ROOT = "https://rl.talis.com"
DEFAULT_ASPIRE_AUTH_URL = "https://users.talis.com/1/oauth/tokens"
DEFAULT_ASPIRE_API_VERSION = 2
ASPIRE_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class AspireConfig:
    """Holds credentials and endpoints for one Aspire tenancy."""

    client_id: str
    client_secret: str
    tenancy_code: str
    tenancy_root: str
    api_root: str = DEFAULT_ASPIRE_API_ROOT
    auth_url: str = DEFAULT_ASPIRE_AUTH_URL
    api_version: int = DEFAULT_ASPIRE_API_VERSION
    http: HttpClientConfig = field(
        default_factory=lambda: HttpClientConfig(
            name="aspire", timeout_seconds=ASPIRE_TIMEOUT_SECONDS
        )
    )


def get_aspire_config(*, http: HttpClientConfig | None = None) -> AspireConfig:
    values = require_env_vars(
        (
            "ASPIRE_API_CLIENT_ID",
            "ASPIRE_API_SECRET",
            "ASPIRE_TENANT",
            "ASPIRE_TENANCY_ROOT",
        )
    )
    timeout = optional_float_env_var("ASPIRE_TIMEOUT", ASPIRE_TIMEOUT_SECONDS)
    return AspireConfig(
        client_id=values["ASPIRE_API_CLIENT_ID"],
        client_secret=values["ASPIRE_API_SECRET"],
        tenancy_code=values["ASPIRE_TENANT"],
        tenancy_root=values["ASPIRE_TENANCY_ROOT"].rstrip("/"),
        api_root=(optional_env_var("ASPIRE_API_ROOT") or DEFAULT_ASPIRE_API_ROOT).rstrip("/"),
        auth_url=optional_env_var("ASPIRE_AUTH_URL") or DEFAULT_ASPIRE_AUTH_URL,
        api_version=optional_int_env_var("ASPIRE_API_VERSION", DEFAULT_ASPIRE_API_VERSION),
        # a zero timeout disables the client-side limit
        http=http
        or HttpClientConfig(name="aspire", timeout_seconds=timeout if timeout > 0 else None),
    )
