"""Helpers for inspecting and ordering selection lists."""
from __future__ import annotations

from collections.abc import Sequence

from graftql.ir.nodes import InlineFragment, ScalarField, Selection

TYPENAME_KEY = "__typename"


def unaliased_selection_index(selections: Sequence[Selection], field_name: str) -> int:
    """Return the index of the unaliased scalar ``field_name``, or ``-1``."""
    for index, selection in enumerate(selections):
        if (
            isinstance(selection, ScalarField)
            and selection.alias is None
            and selection.name == field_name
        ):
            return index
    return -1


def has_unaliased_selection(selections: Sequence[Selection], field_name: str) -> bool:
    return unaliased_selection_index(selections, field_name) != -1


def inline_fragment_index(
    selections: Sequence[Selection], type_condition: str, field_name: str
) -> int:
    """Return the index of ``... on type_condition`` selecting ``field_name`` unaliased.

    Returns ``-1`` when no such inline fragment exists.
    """
    for index, selection in enumerate(selections):
        if (
            isinstance(selection, InlineFragment)
            and selection.type_condition == type_condition
            and has_unaliased_selection(selection.selections, field_name)
        ):
            return index
    return -1


def is_discriminator(selection: Selection) -> bool:
    """True for any ``__typename`` scalar, aliased or not.

    Only ordering uses this.  Whether a type's discriminator is already
    selected is decided by :func:`has_unaliased_selection`, so an aliased
    ``__typename`` is sorted first but does not stand in for the unaliased one.
    """
    return isinstance(selection, ScalarField) and selection.name == TYPENAME_KEY


def sort_discriminator_first(selections: Sequence[Selection]) -> list[Selection]:
    """Move ``__typename`` selections ahead of their siblings.

    The sort is stable, so every other selection keeps its relative order.
    """
    return sorted(selections, key=lambda s: 0 if is_discriminator(s) else 1)
