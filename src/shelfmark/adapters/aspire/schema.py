"""Pydantic models describing the Talis Aspire API payloads.

Source payloads are not trusted to be well formed. Fields the object graph depends on
are coerced in "before" validators so that a malformed value reads as absent or empty
instead of failing the whole record.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _text_or_none(value: object) -> object:
    return value if isinstance(value, str) else None


def _strings(value: object) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, str)]


def _mappings(value: object) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [dict(entry) for entry in value if isinstance(entry, Mapping)]


class AspireBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TokenResponse(AspireBaseModel):
    access_token: str
    token_type: str | None = None
    expires_in: int | None = None
    scope: str | None = None


class ListDetailsPayload(AspireBaseModel):
    """Envelope of the list details API.

    Only the keys the object graph depends on are typed; everything else is carried
    through untouched so item and resource records keep their full content.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    uri: str | None = None
    name: str | None = None
    items: list[dict[str, Any]] = Field(default_factory=list)
    modules: list[dict[str, Any]] | None = None
    time_period: dict[str, Any] | None = Field(default=None, alias="timePeriod")

    @field_validator("uri", "name", mode="before")
    @classmethod
    def _text_only(cls, value: object) -> object:
        return _text_or_none(value)

    @field_validator("items", mode="before")
    @classmethod
    def _keep_item_records(cls, value: object) -> list[dict[str, Any]]:
        return _mappings(value)

    @field_validator("modules", mode="before")
    @classmethod
    def _keep_module_records(cls, value: object) -> list[dict[str, Any]] | None:
        # a missing module list lets the linked data supply the modules
        return _mappings(value) if isinstance(value, list) else None

    @field_validator("time_period", mode="before")
    @classmethod
    def _keep_time_period(cls, value: object) -> dict[str, Any] | None:
        return dict(value) if isinstance(value, Mapping) else None

    def to_record(self) -> dict[str, Any]:
        # unset keys stay absent so callers can tell "missing" from "empty"
        return self.model_dump(by_alias=True, exclude_unset=True)


class UserProfilePayload(AspireBaseModel):
    uri: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    surname: str | None = None
    email: list[str] = Field(default_factory=list)
    role: list[str] = Field(default_factory=list)

    @field_validator("uri", "first_name", "surname", mode="before")
    @classmethod
    def _text_only(cls, value: object) -> object:
        return _text_or_none(value)

    @field_validator("email", "role", mode="before")
    @classmethod
    def _string_lists(cls, value: object) -> list[str]:
        return _strings(value)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
