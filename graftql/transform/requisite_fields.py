"""Requisite field transform.

Adds the fields the runtime needs to normalize responses:

* **Identity** – every ``LinkedField`` and ``Fragment`` on a composite type
  selects the type's identity field.  An existing unaliased selection is
  flagged (its metadata is merged, not replaced); otherwise a flagged
  ``ScalarField`` is appended.  Abstract types that do not declare the field
  themselves get ``... on Node { <id> }`` when any member implements ``Node``,
  plus ``... on Member { <id> }`` for every member outside ``Node`` that
  declares its own identity field.
* **Discriminator** – every ``LinkedField`` of a union or interface type
  selects ``__typename``.

``__typename`` is then moved ahead of its siblings; every other selection
keeps its relative order.

Running the transform on its own output changes nothing: the existence checks
are satisfied by the selections the first run injected.
"""
from __future__ import annotations

import structlog

from graftql.compile.context import CompilerContext
from graftql.compile.registry import TransformRegistry
from graftql.errors import CompilationError
from graftql.ir.metadata import IDENTITY, merge_metadata
from graftql.ir.nodes import Fragment, InlineFragment, LinkedField, ScalarField, Selection
from graftql.ir.selections import (
    TYPENAME_KEY,
    has_unaliased_selection,
    inline_fragment_index,
    sort_discriminator_first,
    unaliased_selection_index,
)
from graftql.schema.identity import NODE_INTERFACE, IdentityFieldResolver
from graftql.schema.type_system import FieldInfo, TypeInfo
from graftql.transform.visitor import IRVisitor

logger = structlog.get_logger(__name__)

TYPENAME_TYPE = "String!"


@TransformRegistry.register("requisite_fields")
def transform(context: CompilerContext) -> CompilerContext:
    """Return a new context whose documents select identity and discriminator fields.

    Raises:
        SchemaAmbiguityError: If the ``Node`` interface is ambiguous.  Raised
            before any document is visited.
        CompilationError: If a field's type cannot be classified.
    """
    resolver = IdentityFieldResolver(context.schema)
    result = RequisiteFieldTransform(resolver).transform(context)
    logger.debug(
        "requisite_fields_transformed",
        documents=len(result),
        identity_field=resolver.field_name,
    )
    return result


class RequisiteFieldTransform(IRVisitor):
    """Visitor injecting identity and discriminator selections.

    Args:
        resolver: Identity field resolver built for the context's schema.
    """

    def __init__(self, resolver: IdentityFieldResolver) -> None:
        self._resolver = resolver

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def visit_fragment(self, node: Fragment, context: CompilerContext) -> Fragment:
        node = self.traverse(node, context)
        type_info = _composite_type(context, node.type, node.name)
        selections = self._with_identity(node.selections, type_info, context)
        return _with_selections(node, selections)

    def visit_linked_field(self, node: LinkedField, context: CompilerContext) -> LinkedField:
        node = self.traverse(node, context)
        type_info = _composite_type(context, node.type, node.name)
        selections = self._with_identity(node.selections, type_info, context)
        if type_info.is_abstract and not has_unaliased_selection(selections, TYPENAME_KEY):
            selections.append(ScalarField(name=TYPENAME_KEY, type=TYPENAME_TYPE))
        return _with_selections(node, sort_discriminator_first(selections))

    # ------------------------------------------------------------------
    # Identity selection
    # ------------------------------------------------------------------

    def _with_identity(
        self,
        selections: list[Selection],
        type_info: TypeInfo,
        context: CompilerContext,
    ) -> list[Selection]:
        selections = list(selections)
        for name in self._resolver.candidate_names:
            index = unaliased_selection_index(selections, name)
            if index >= 0:
                selections[index] = _mark_identity(selections[index])
                return selections
            field = type_info.get_field(name) if type_info.can_have_selections else None
            if field is not None:
                selections.append(_identity_field(field))
                return selections
        if type_info.is_abstract:
            return self._with_identity_fragments(selections, type_info, context)
        return selections

    def _with_identity_fragments(
        self,
        selections: list[Selection],
        type_info: TypeInfo,
        context: CompilerContext,
    ) -> list[Selection]:
        schema = context.schema
        if schema.may_implement(type_info.name, NODE_INTERFACE):
            node_type = schema.get_type(NODE_INTERFACE)
            node_field = node_type.get_field(self._resolver.field_name) if node_type else None
            if node_field is not None:
                _ensure_identity_fragment(selections, NODE_INTERFACE, node_field)
        for member in schema.possible_types(type_info.name):
            if self._resolver.implements_node(member.name):
                continue
            member_field = self._resolver.identity_field_for(member.name)
            if member_field is not None:
                _ensure_identity_fragment(selections, member.name, member_field)
        return selections


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _composite_type(context: CompilerContext, type_ref: str, owner: str) -> TypeInfo:
    type_info = context.schema.resolve(type_ref)
    if type_info is None or not type_info.is_composite:
        raise CompilationError(
            f"Expected '{owner}' to select a composite type, got '{type_ref}'."
        )
    return type_info


def _with_selections(node, selections: list[Selection]):
    if selections == node.selections:
        return node
    return node.model_copy(update={"selections": selections})


def _identity_field(field: FieldInfo) -> ScalarField:
    return ScalarField(name=field.name, type=field.type, metadata=IDENTITY)


def _mark_identity(selection: Selection) -> Selection:
    metadata = selection.metadata
    if metadata is not None and metadata.is_identity:
        return selection
    return selection.model_copy(update={"metadata": merge_metadata(metadata, IDENTITY)})


def _ensure_identity_fragment(
    selections: list[Selection], type_condition: str, field: FieldInfo
) -> None:
    """Append ``... on type_condition { field }`` unless an equivalent exists.

    An existing inline fragment that already selects the field unaliased has
    that selection flagged instead.
    """
    index = inline_fragment_index(selections, type_condition, field.name)
    if index < 0:
        selections.append(
            InlineFragment(type_condition=type_condition, selections=[_identity_field(field)])
        )
        return
    fragment = selections[index]
    inner = list(fragment.selections)
    field_index = unaliased_selection_index(inner, field.name)
    inner[field_index] = _mark_identity(inner[field_index])
    selections[index] = _with_selections(fragment, inner)
