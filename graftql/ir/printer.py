"""Print IR documents back to GraphQL text.

Used to derive ``Request.text`` when the parser did not supply it, and to
make transform output readable in tests.  Metadata is not printed.
"""
from __future__ import annotations

import json
from typing import Any

from graftql.errors import CompilationError
from graftql.ir.nodes import (
    Argument,
    BatchRequest,
    Condition,
    Fragment,
    FragmentSpread,
    InlineFragment,
    LinkedField,
    Request,
    ScalarField,
    Selection,
    VariableDefinition,
)

INDENT = "  "


def print_document(node: Fragment | Request | BatchRequest) -> str:
    """Return the GraphQL text of a document."""
    if isinstance(node, Fragment):
        return f"fragment {node.name} on {node.type} {_print_block(node.selections, 0)}"
    if isinstance(node, Request):
        head = f"{node.operation} {node.name}{_print_variables(node.variables)}"
        return f"{head} {_print_block(node.selections, 0)}"
    if isinstance(node, BatchRequest):
        return "\n\n".join(print_document(request) for request in node.requests)
    raise CompilationError(f"Cannot print node of kind '{getattr(node, 'kind', node)}'.")


def _print_variables(variables: list[VariableDefinition]) -> str:
    if not variables:
        return ""
    printed = []
    for variable in variables:
        entry = f"${variable.name}: {variable.type}"
        if variable.default_value is not None:
            entry += f" = {_print_value(variable.default_value)}"
        printed.append(entry)
    return "(" + ", ".join(printed) + ")"


def _print_block(selections: list[Selection], depth: int) -> str:
    if not selections:
        return "{\n" + INDENT * depth + "}"
    lines = [_print_selection(s, depth + 1) for s in selections]
    return "{\n" + "\n".join(lines) + "\n" + INDENT * depth + "}"


def _print_selection(selection: Selection, depth: int) -> str:
    pad = INDENT * depth
    if isinstance(selection, ScalarField):
        return pad + _print_field_head(selection.alias, selection.name, selection.args)
    if isinstance(selection, LinkedField):
        head = _print_field_head(selection.alias, selection.name, selection.args)
        return f"{pad}{head} {_print_block(selection.selections, depth)}"
    if isinstance(selection, InlineFragment):
        return f"{pad}... on {selection.type_condition} {_print_block(selection.selections, depth)}"
    if isinstance(selection, Condition):
        directive = "include" if selection.passing_value else "skip"
        block = _print_block(selection.selections, depth)
        return f"{pad}... @{directive}(if: ${selection.condition}) {block}"
    if isinstance(selection, FragmentSpread):
        return f"{pad}...{selection.name}"
    raise CompilationError(f"Cannot print selection of kind '{getattr(selection, 'kind', selection)}'.")


def _print_field_head(alias: str | None, name: str, args: list[Argument]) -> str:
    head = f"{alias}: {name}" if alias else name
    if args:
        printed = ", ".join(f"{a.name}: {_print_argument(a)}" for a in args)
        head += f"({printed})"
    return head


def _print_argument(arg: Argument) -> str:
    if arg.variable is not None:
        return f"${arg.variable}"
    return _print_value(arg.value)


def _print_value(value: Any) -> str:
    if isinstance(value, dict):
        inner = ", ".join(f"{k}: {_print_value(v)}" for k, v in value.items())
        return "{" + inner + "}"
    if isinstance(value, list):
        return "[" + ", ".join(_print_value(v) for v in value) + "]"
    return json.dumps(value)
