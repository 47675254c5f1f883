"""Module text formatting.

The writer hands a :class:`ModuleSpec` to a :data:`FormatModule` callable and
writes whatever text comes back.  Target-language emission is pluggable;
:func:`format_python_module` is the built-in Python formatter.
"""
from __future__ import annotations

import json
import pprint
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ModuleSpec:
    """Everything a formatter needs to emit one artifact.

    Attributes:
        module_name: ``<document name>.graphql``.
        document_type: ``Fragment``, ``Request`` or ``BatchRequest``.
        doc_text: Printed operation text (``None`` for fragments).
        concrete_text: Canonical JSON of the (possibly persisted) node.
        type_text: Generated type definitions.
        hash: Hash marker line content (``@graftHash <hash>``).
        dev_only: Values only emitted for development builds, such as the
            original text of a persisted query.
        runtime_module: Module the generated code imports runtime types from.
        source_hash: Hash of the source file the document came from.
    """

    module_name: str
    document_type: str
    doc_text: str | None
    concrete_text: str
    type_text: str
    hash: str | None
    dev_only: dict[str, Any] = field(default_factory=dict)
    runtime_module: str = "graftql"
    source_hash: str = ""


FormatModule = Callable[[ModuleSpec], str]


def format_python_module(spec: ModuleSpec) -> str:
    """Emit a Python module exposing the document as ``node``."""
    lines = ["# This file is generated by graftql. Do not edit."]
    if spec.hash:
        lines.append(f"# {spec.hash}")
    if spec.source_hash:
        lines.append(f"# source: {spec.source_hash}")
    lines.append("")
    if spec.doc_text:
        lines.append('"""')
        lines.append(spec.doc_text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"'))
        lines.append('"""')
        lines.append("")
    lines.append("from __future__ import annotations")
    lines.append("")
    if spec.type_text:
        lines.append(spec.type_text.rstrip())
        lines.append("")
    concrete = json.loads(spec.concrete_text)
    literal = pprint.pformat(concrete, sort_dicts=False, width=88)
    lines.append(f"node = {literal}  # {spec.document_type} ({spec.runtime_module})")
    assignments = dev_only_assignments("node", spec.dev_only)
    if assignments:
        lines.append("")
        lines.append("if __debug__:")
        lines.extend(f"    {assignment}" for assignment in assignments)
    lines.append("")
    return "\n".join(lines)


def dev_only_assignments(target: str, values: Any) -> list[str]:
    """Flatten nested dev-only values into item assignments on ``target``.

    ``{"requests": [{"text": "q"}]}`` becomes
    ``['node["requests"][0]["text"] = \\'q\\'']``.
    """
    if isinstance(values, dict):
        out: list[str] = []
        for key, value in values.items():
            out.extend(dev_only_assignments(f"{target}[{key!r}]", value))
        return out
    if isinstance(values, list):
        out = []
        for index, value in enumerate(values):
            out.extend(dev_only_assignments(f"{target}[{index}]", value))
        return out
    return [f"{target} = {values!r}"]
