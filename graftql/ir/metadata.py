"""Selection metadata.

Selections carry a small set of known flags plus an ``extensions`` mapping
for anything else a transform or a caller wants to attach.  Metadata is
merged, never replaced: :meth:`Metadata.merge` keeps the union of extension
keys and lets explicitly set flags of the incoming value win.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Metadata(BaseModel):
    """Flags attached to a selection.

    Attributes:
        is_identity: The selection is the entity's identity field.
        extensions: Open mapping for flags graftql does not know about.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    is_identity: bool = Field(default=False, alias="isIdentity")
    extensions: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Metadata:
        """Split a flat mapping into known flags and extensions.

        ``{"custom": True, "isIdentity": True}`` becomes
        ``Metadata(is_identity=True, extensions={"custom": True})``.
        """
        known: dict[str, Any] = {}
        extensions: dict[str, Any] = {}
        for key, value in data.items():
            if key in ("isIdentity", "is_identity"):
                known["is_identity"] = value
            else:
                extensions[key] = value
        return cls(extensions=extensions, **known)

    def to_mapping(self) -> dict[str, Any]:
        """Flatten back to a single mapping (flags only when set)."""
        data = dict(self.extensions)
        if "is_identity" in self.model_fields_set:
            data["isIdentity"] = self.is_identity
        return data

    def merge(self, other: Metadata) -> Metadata:
        """Return a new Metadata with ``other`` merged on top of ``self``.

        Extension keys are unioned with ``other`` winning on conflict; only
        flags explicitly set on ``other`` override ``self``.
        """
        update: dict[str, Any] = {
            name: getattr(other, name)
            for name in other.model_fields_set
            if name != "extensions"
        }
        update["extensions"] = {**self.extensions, **other.extensions}
        return self.model_copy(update=update)


IDENTITY = Metadata(is_identity=True)


def merge_metadata(existing: Metadata | None, incoming: Metadata) -> Metadata:
    """Merge ``incoming`` into ``existing``, which may be absent."""
    if existing is None:
        return incoming
    return existing.merge(incoming)
