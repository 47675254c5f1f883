"""Artifact content hashing.

Every artifact embeds ``@graftHash <32 hex chars>`` computed from the salt,
the canonical JSON of the document, the generated type text, and whether
persistence is enabled.  The writer compares it with the hash embedded in the
previous artifact to skip unchanged writes.
"""
from __future__ import annotations

import hashlib
import json
import re

from graftql.compile.context import DocumentNode

#: Bump to invalidate every previously generated artifact.
HASH_SALT = "graftql-cache-breaker-1"
HASH_MARKER = "@graftHash"

_HASH_PATTERN = re.compile(rf"{re.escape(HASH_MARKER)} (\w{{32}})\b", re.MULTILINE)
_CONFLICT_PATTERN = re.compile(r"<<<<<|>>>>>")


def serialize_node(node: DocumentNode) -> str:
    """Canonical JSON for ``node``: sorted keys, compact separators."""
    return json.dumps(
        node.model_dump(mode="json", by_alias=True),
        sort_keys=True,
        separators=(",", ":"),
    )


def compute_hash(
    node: DocumentNode,
    type_text: str = "",
    persisted: bool = False,
    salt: str = HASH_SALT,
) -> str:
    """Return the md5 hex digest identifying an artifact's content."""
    hasher = hashlib.md5()
    hasher.update(salt.encode("utf-8"))
    hasher.update(serialize_node(node).encode("utf-8"))
    if type_text:
        hasher.update(type_text.encode("utf-8"))
    if persisted:
        hasher.update(b"persisted")
    return hasher.hexdigest()


def extract_hash(text: str | None) -> str | None:
    """Return the hash embedded in a previous artifact, if it can be trusted.

    Content with merge-conflict markers is never trusted, even when a hash
    marker is present, so a conflicted artifact is always regenerated.
    """
    if not text:
        return None
    if _CONFLICT_PATTERN.search(text):
        return None
    match = _HASH_PATTERN.search(text)
    return match.group(1) if match else None


def format_hash_marker(hash_value: str) -> str:
    return f"{HASH_MARKER} {hash_value}"
