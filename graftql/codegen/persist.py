"""Persisted query substitution.

When persistence is enabled, each operation's text is sent to the
persistence adapter, which returns an opaque id.  The emitted node carries the
id instead of the text; the text survives in the development-only side
channel and in the companion ``{id: text}`` query map.

Fragments are never persisted.
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from graftql.compile.context import DocumentNode
from graftql.errors import CompilationError, PersistError
from graftql.ir.nodes import BatchRequest, Fragment, Request

#: ``text -> id``.  May be slow and may fail.
PersistQuery = Callable[[str], Awaitable[str]]


@dataclass
class PersistResult:
    """Outcome of persisting one document.

    Attributes:
        node: The node with operation text replaced by ids.
        query_map: ``{id: text}`` for every persisted operation.
        dev_only: Original texts, mirrored into development builds.
    """

    node: DocumentNode
    query_map: dict[str, str] = field(default_factory=dict)
    dev_only: dict[str, Any] = field(default_factory=dict)


async def persist_document(node: DocumentNode, persist_query: PersistQuery) -> PersistResult:
    """Replace operation text with persisted ids.

    Raises:
        PersistError: If the adapter fails for any operation of ``node``.
    """
    if isinstance(node, Fragment):
        return PersistResult(node)
    if isinstance(node, Request):
        persisted, query_id, text = await _persist_request(node, node.name, persist_query)
        return PersistResult(persisted, {query_id: text}, {"text": text})
    if isinstance(node, BatchRequest):
        outcomes = await asyncio.gather(
            *(_persist_request(r, node.name, persist_query) for r in node.requests)
        )
        query_map = {query_id: text for _, query_id, text in outcomes}
        return PersistResult(
            node.model_copy(update={"requests": [r for r, _, _ in outcomes]}),
            query_map,
            {"requests": [{"text": text} for _, _, text in outcomes]},
        )
    raise CompilationError(f"Unexpected document kind: {getattr(node, 'kind', node)!r}.")


async def _persist_request(
    request: Request, document: str, persist_query: PersistQuery
) -> tuple[Request, str, str]:
    if request.text is None:
        raise PersistError(document, f"operation '{request.name}' has no text to persist")
    try:
        query_id = await persist_query(request.text)
    except Exception as exc:
        raise PersistError(document, str(exc) or type(exc).__name__) from exc
    return request.model_copy(update={"text": None, "id": query_id}), query_id, request.text
