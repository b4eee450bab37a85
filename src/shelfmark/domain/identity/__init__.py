"""Institutional identity: primary email selection, directory usernames, user profiles."""

from __future__ import annotations

from .directory import IdentityDirectory
from .email import EmailSelector
from .users import UserLookup, build_user

__all__ = ["EmailSelector", "IdentityDirectory", "UserLookup", "build_user"]
