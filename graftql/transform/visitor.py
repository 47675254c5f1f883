"""Explicit IR visitor.

``IRVisitor`` rebuilds every document of a :class:`CompilerContext`.  The
context is passed to every ``visit_*`` method as an argument; visitors keep
no per-document state on ``self``.

Subclasses override the ``visit_*`` hooks they care about and call
:meth:`IRVisitor.traverse` to rebuild a node's children first, which makes
the rewrite bottom-up::

    class UppercaseAliases(IRVisitor):
        def visit_scalar_field(self, node, context):
            return node.model_copy(update={"alias": node.name.upper()})
"""
from __future__ import annotations

from typing import TypeVar

from graftql.compile.context import CompilerContext, DocumentNode
from graftql.errors import CompilationError
from graftql.ir.nodes import (
    BatchRequest,
    Condition,
    Fragment,
    FragmentSpread,
    InlineFragment,
    LinkedField,
    Request,
    ScalarField,
    Selection,
)

ParentT = TypeVar("ParentT", LinkedField, InlineFragment, Condition, Fragment, Request)


class IRVisitor:
    """Base visitor: every hook returns its node unchanged after traversal."""

    def transform(self, context: CompilerContext) -> CompilerContext:
        """Return a new context holding the visited version of every document."""
        result = CompilerContext(context.schema)
        for document in context.documents():
            result = result.add(self.visit_document(document, context))
        return result

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def visit_document(self, node: DocumentNode, context: CompilerContext) -> DocumentNode:
        if isinstance(node, Fragment):
            return self.visit_fragment(node, context)
        if isinstance(node, Request):
            return self.visit_request(node, context)
        if isinstance(node, BatchRequest):
            return self.visit_batch_request(node, context)
        raise CompilationError(f"Unexpected document kind: {getattr(node, 'kind', node)!r}.")

    def visit_selection(self, node: Selection, context: CompilerContext) -> Selection:
        if isinstance(node, ScalarField):
            return self.visit_scalar_field(node, context)
        if isinstance(node, LinkedField):
            return self.visit_linked_field(node, context)
        if isinstance(node, InlineFragment):
            return self.visit_inline_fragment(node, context)
        if isinstance(node, Condition):
            return self.visit_condition(node, context)
        if isinstance(node, FragmentSpread):
            return self.visit_fragment_spread(node, context)
        raise CompilationError(f"Unexpected selection kind: {getattr(node, 'kind', node)!r}.")

    def traverse(self, node: ParentT, context: CompilerContext) -> ParentT:
        """Rebuild ``node`` with each child selection visited."""
        selections = [self.visit_selection(s, context) for s in node.selections]
        if selections == node.selections:
            return node
        return node.model_copy(update={"selections": selections})

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def visit_fragment(self, node: Fragment, context: CompilerContext) -> Fragment:
        return self.traverse(node, context)

    def visit_request(self, node: Request, context: CompilerContext) -> Request:
        return self.traverse(node, context)

    def visit_batch_request(
        self, node: BatchRequest, context: CompilerContext
    ) -> BatchRequest:
        requests = [self.visit_request(r, context) for r in node.requests]
        return node.model_copy(update={"requests": requests})

    def visit_linked_field(self, node: LinkedField, context: CompilerContext) -> LinkedField:
        return self.traverse(node, context)

    def visit_inline_fragment(
        self, node: InlineFragment, context: CompilerContext
    ) -> InlineFragment:
        return self.traverse(node, context)

    def visit_condition(self, node: Condition, context: CompilerContext) -> Condition:
        return self.traverse(node, context)

    def visit_scalar_field(self, node: ScalarField, context: CompilerContext) -> ScalarField:
        return node

    def visit_fragment_spread(
        self, node: FragmentSpread, context: CompilerContext
    ) -> FragmentSpread:
        return node
