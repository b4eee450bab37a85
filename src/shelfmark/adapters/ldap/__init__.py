"""Public interface for the LDAP directory adapter."""

from __future__ import annotations

from .client import LdapDirectorySession

__all__ = ["LdapDirectorySession"]
