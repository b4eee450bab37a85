"""Domain ports."""

from __future__ import annotations

from .directory import DirectorySession
from .fetching import LinkedDataBundle, ReadingListSource

__all__ = ["DirectorySession", "LinkedDataBundle", "ReadingListSource"]
