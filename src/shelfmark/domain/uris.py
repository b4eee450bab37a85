"""URI helpers shared by the model and the object factory."""

from __future__ import annotations

# Linked-data keys of the form f"{SEQUENCE_PREFIX}_{n}" carry the child at 1-based position n.
SEQUENCE_PREFIX = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"


def id_from_uri(uri: str | None) -> str | None:
    """Return the last path component of a URI, minus any format suffix (.json etc.)."""

    if not uri:
        return None
    last = uri.rstrip("/").split("/")[-1]
    if not last:
        return None
    return last.split(".")[0] or None


def sequence_position(key: str) -> int | None:
    """Return the 1-based position encoded in an ordered-children key, or None."""

    prefix, sep, index = key.rpartition("_")
    if not sep or prefix != SEQUENCE_PREFIX:
        return None
    try:
        position = int(index)
    except ValueError:
        return None
    return position if position >= 1 else None
