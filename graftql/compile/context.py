"""Compiler context value object.

Packages the ``(schema, documents)`` pair every transform needs into a single
immutable object.  The schema is shared read-only by all passes; the
documents are replaced wholesale by each pass, so a context handed to a
transform is never altered behind the caller's back.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Union

from graftql.errors import CompilationError
from graftql.ir.nodes import BatchRequest, Fragment, Request
from graftql.schema.type_system import TypeSystem

DocumentNode = Union[Fragment, Request, BatchRequest]


@dataclass(frozen=True)
class CompilerContext:
    """Immutable context for a single compile pass.

    Attributes:
        schema: The read-only type system.
        _documents: Documents keyed by name, in insertion order.
    """

    schema: TypeSystem
    _documents: dict[str, DocumentNode] = field(default_factory=dict, repr=False)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_documents(
        cls, schema: TypeSystem, documents: Iterable[DocumentNode]
    ) -> CompilerContext:
        """Build a context holding ``documents``.

        Raises:
            CompilationError: If two documents share a name.
        """
        ctx = cls(schema)
        for document in documents:
            ctx = ctx.add(document)
        return ctx

    def add(self, node: DocumentNode) -> CompilerContext:
        """Return a new context that also holds ``node``.

        Raises:
            CompilationError: If a document with the same name exists.
        """
        if node.name in self._documents:
            raise CompilationError(
                f"Duplicate document named '{node.name}'.", document=node.name
            )
        return CompilerContext(self.schema, {**self._documents, node.name: node})

    def replace(self, node: DocumentNode) -> CompilerContext:
        """Return a new context with the document named ``node.name`` swapped out.

        Raises:
            CompilationError: If no document with that name exists.
        """
        if node.name not in self._documents:
            raise CompilationError(
                f"Cannot replace unknown document '{node.name}'.", document=node.name
            )
        return CompilerContext(self.schema, {**self._documents, node.name: node})

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, name: str) -> DocumentNode | None:
        """Returns the document named ``name``, or ``None``."""
        return self._documents.get(name)

    def documents(self) -> list[DocumentNode]:
        """Returns all documents in insertion order."""
        return list(self._documents.values())

    def names(self) -> list[str]:
        return list(self._documents)

    def __len__(self) -> int:
        return len(self._documents)
