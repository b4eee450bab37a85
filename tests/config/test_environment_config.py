from __future__ import annotations

import logging
from pathlib import Path

import pytest

from shelfmark.config import (
    ConfigurationError,
    HttpClientConfig,
    MissingConfigurationError,
    configure_logging,
    get_aspire_config,
    get_directory_config,
    get_identity_files_config,
    require_env_vars,
)

ASPIRE_ENV = {
    "ASPIRE_API_CLIENT_ID": "client-id",
    "ASPIRE_API_SECRET": "client-secret",
    "ASPIRE_TENANT": "lancaster",
    "ASPIRE_TENANCY_ROOT": "http://lists.example.ac.uk/",
}
OPTIONAL_ASPIRE = (
    "ASPIRE_API_ROOT",
    "ASPIRE_AUTH_URL",
    "ASPIRE_API_VERSION",
    "ASPIRE_TIMEOUT",
)
LDAP_ENV = {
    "LDAP_HOST": "ldap.example.ac.uk",
    "LDAP_USER": "cn=reader,o=example",
    "LDAP_PASSWORD": "secret",
    "LDAP_BASE": "ou=people,o=example",
}


@pytest.fixture
def aspire_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name, value in ASPIRE_ENV.items():
        monkeypatch.setenv(name, value)
    for name in OPTIONAL_ASPIRE:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def ldap_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name, value in LDAP_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("LDAP_PORT", raising=False)
    monkeypatch.delenv("LDAP_USE_CACHE", raising=False)
    return monkeypatch


def test_require_env_vars_names_every_missing_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRESENT_VAR", "value")
    monkeypatch.setenv("BLANK_VAR", "   ")
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["PRESENT_VAR", "MISSING_VAR", "BLANK_VAR"])

    assert exc.value.names == ("BLANK_VAR", "MISSING_VAR")
    assert "BLANK_VAR, MISSING_VAR" in str(exc.value)
    assert require_env_vars(["PRESENT_VAR"]) == {"PRESENT_VAR": "value"}


def test_aspire_config_defaults(aspire_env: pytest.MonkeyPatch) -> None:
    config = get_aspire_config()

    assert config.client_id == "client-id"
    assert config.client_secret == "client-secret"
    assert config.tenancy_code == "lancaster"
    assert config.tenancy_root == "http://lists.example.ac.uk"
    assert config.api_root == "https://rl.talis.com"
    assert config.auth_url == "https://users.talis.com/1/oauth/tokens"
    assert config.api_version == 2
    assert config.http.timeout_seconds == 30.0


def test_aspire_config_overrides(aspire_env: pytest.MonkeyPatch) -> None:
    aspire_env.setenv("ASPIRE_API_ROOT", "https://rl.example.com/")
    aspire_env.setenv("ASPIRE_AUTH_URL", "https://auth.example.com/tokens")
    aspire_env.setenv("ASPIRE_API_VERSION", "3")
    aspire_env.setenv("ASPIRE_TIMEOUT", "0")

    config = get_aspire_config()

    assert config.api_root == "https://rl.example.com"
    assert config.auth_url == "https://auth.example.com/tokens"
    assert config.api_version == 3
    assert config.http.timeout_seconds is None


def test_aspire_config_accepts_http_override(aspire_env: pytest.MonkeyPatch) -> None:
    http = HttpClientConfig(name="custom", timeout_seconds=5.0)

    assert get_aspire_config(http=http).http is http


def test_aspire_config_rejects_bad_numbers(aspire_env: pytest.MonkeyPatch) -> None:
    aspire_env.setenv("ASPIRE_API_VERSION", "two")

    with pytest.raises(ConfigurationError, match="ASPIRE_API_VERSION"):
        get_aspire_config()

    aspire_env.setenv("ASPIRE_API_VERSION", "2")
    aspire_env.setenv("ASPIRE_TIMEOUT", "soon")

    with pytest.raises(ConfigurationError, match="ASPIRE_TIMEOUT"):
        get_aspire_config()


def test_aspire_config_requires_credentials(aspire_env: pytest.MonkeyPatch) -> None:
    aspire_env.delenv("ASPIRE_API_SECRET")

    with pytest.raises(MissingConfigurationError, match="ASPIRE_API_SECRET"):
        get_aspire_config()


def test_directory_config(ldap_env: pytest.MonkeyPatch) -> None:
    config = get_directory_config()

    assert config.host == "ldap.example.ac.uk"
    assert config.port == 389
    assert config.base == "ou=people,o=example"
    assert config.use_cache is False

    ldap_env.setenv("LDAP_PORT", "636")
    ldap_env.setenv("LDAP_USE_CACHE", "Yes")
    config = get_directory_config()

    assert config.port == 636
    assert config.use_cache is True


def test_directory_config_rejects_unknown_flags(ldap_env: pytest.MonkeyPatch) -> None:
    ldap_env.setenv("LDAP_USE_CACHE", "sometimes")

    with pytest.raises(ConfigurationError, match="LDAP_USE_CACHE"):
        get_directory_config()


def test_identity_files_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("EMAIL_CONF", str(tmp_path / "email.conf"))
    monkeypatch.setenv("EMAIL_MAP", "  ")
    monkeypatch.delenv("ASPIRE_USERS", raising=False)

    config = get_identity_files_config()

    assert config.email_rules_path == tmp_path / "email.conf"
    assert config.email_map_path is None
    assert config.users_path is None


def test_configure_logging_sets_root_level() -> None:
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        configure_logging(level=logging.DEBUG, force=True)

        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)


def test_configure_logging_quiets_transport_loggers() -> None:
    root = logging.getLogger()
    httpx_logger = logging.getLogger("httpx")
    previous = root.level, list(root.handlers), httpx_logger.level
    try:
        configure_logging(level="info", force=True)

        assert root.level == logging.INFO
        assert httpx_logger.level == logging.WARNING
    finally:
        root.handlers[:] = previous[1]
        root.setLevel(previous[0])
        httpx_logger.setLevel(previous[2])
