"""Test fixtures: sample type systems as JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from graftql.schema.type_system import TypeSystem

_FIXTURES_DIR = Path(__file__).parent


def load_type_system(name: Literal["schema", "custom_id_schema"] = "schema") -> TypeSystem:
    """Load a sample TypeSystem from ``<name>.json``.

    Args:
        name: ``'schema'`` (default, ``Node { id }``) or ``'custom_id_schema'``
            (``Node { __id }``).

    Returns:
        The validated TypeSystem.
    """
    data = json.loads((_FIXTURES_DIR / f"{name}.json").read_text())
    return TypeSystem.model_validate(data)
