"""URI classification and object graph construction."""

from __future__ import annotations

from .classify import classify_uri, match_uri
from .factory import LIST_DETAILS_PARAMS, ObjectFactory

__all__ = ["LIST_DETAILS_PARAMS", "ObjectFactory", "classify_uri", "match_uri"]
