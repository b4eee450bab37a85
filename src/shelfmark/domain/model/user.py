"""User profiles referenced by reading lists (owners, creators, publishers)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from shelfmark.domain.model.base import Node
from shelfmark.domain.model.enums import NodeKind


@dataclass(eq=False, kw_only=True)
class User(Node):
    """A user profile with its institutional identity.

    `primary_email` and `username` are resolved once, when the user is built
    (see `shelfmark.domain.identity.users.build_user`), and are not refreshed.
    """

    KIND: ClassVar[NodeKind] = NodeKind.USER

    first_name: str | None = None
    surname: str | None = None
    email: tuple[str, ...] = field(default_factory=tuple)
    role: tuple[str, ...] = field(default_factory=tuple)
    primary_email: str | None = None
    username: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.surname) if part)

    def __str__(self) -> str:
        if not self.primary_email:
            return self.full_name
        return f"{self.full_name} <{self.primary_email}>"
