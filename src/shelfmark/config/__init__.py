"""Application configuration helpers."""

from __future__ import annotations

from .aspire import AspireConfig, get_aspire_config
from .directory import DirectoryConfig, get_directory_config
from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http import HttpClientConfig, ResponseHook
from .identity import IdentityFilesConfig, get_identity_files_config
from .logging import configure_logging

__all__ = [
    "AspireConfig",
    "ConfigurationError",
    "DirectoryConfig",
    "HttpClientConfig",
    "IdentityFilesConfig",
    "MissingConfigurationError",
    "ResponseHook",
    "configure_logging",
    "get_aspire_config",
    "get_directory_config",
    "get_identity_files_config",
    "require_env_vars",
]
