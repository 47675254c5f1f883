"""Artifact writer.

``ArtifactWriter`` turns one transformed document plus its generated type
text into an artifact and decides whether to write it:

1. Fill in missing operation text by printing the document.
2. Hash salt + canonical node JSON + type text + persistence flag.
3. Compare against the hash embedded in the previous artifact.  Equal means
   ``"unchanged"``: nothing is written, not even the query map.
4. In validate-only mode a differing hash means ``"would_update"``: nothing
   is written and the caller can fail the run.
5. Otherwise persist operation text (when enabled), format the module, and
   write the artifact plus the ``{id: text}`` query map.

The hash is computed before persistence so an unchanged document never calls
the persistence adapter.
"""
from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field

from graftql.codegen.directory import CodegenDirectory
from graftql.codegen.formatter import FormatModule, ModuleSpec, format_python_module
from graftql.codegen.hashing import (
    HASH_SALT,
    compute_hash,
    extract_hash,
    format_hash_marker,
    serialize_node,
)
from graftql.codegen.persist import PersistQuery, PersistResult, persist_document
from graftql.compile.context import DocumentNode
from graftql.ir.nodes import BatchRequest, Request
from graftql.ir.printer import print_document

logger = structlog.get_logger(__name__)

WriteStatus = Literal["written", "unchanged", "would_update", "superseded"]


class GeneratedArtifact(BaseModel):
    """A generated output file.

    Attributes:
        name: Document name.
        path: Artifact filename relative to the output directory.
        content: Full module text.
        hash: Content hash embedded in ``content``.
        query_map: ``{id: text}`` when the document was persisted.
        dev_only: Development-only values emitted alongside the node.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    path: str
    content: str
    hash: str
    query_map: dict[str, str] | None = None
    dev_only: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of :meth:`ArtifactWriter.write`.

    Attributes:
        name: Document name.
        status: What the writer decided.
        hash: Freshly computed content hash.
        artifact: The artifact, when one was written.
        node: The emitted node (persisted ids in place of text), when written.
    """

    name: str
    status: WriteStatus
    hash: str
    artifact: GeneratedArtifact | None = None
    node: DocumentNode | None = None


class ArtifactWriter:
    """Writes generated artifacts into a :class:`CodegenDirectory`.

    Args:
        directory: Output directory (carries the validate-only flag).
        format_module: Formatter producing module text.
        persist_query: Optional persistence adapter; enables persisted queries.
        platform: Optional platform qualifier inserted into filenames.
        extension: Artifact file extension.
        runtime_module: Passed through to the formatter.
        hash_salt: Salt mixed into every content hash.
    """

    def __init__(
        self,
        directory: CodegenDirectory,
        format_module: FormatModule = format_python_module,
        *,
        persist_query: PersistQuery | None = None,
        platform: str | None = None,
        extension: str = "py",
        runtime_module: str = "graftql",
        hash_salt: str = HASH_SALT,
    ) -> None:
        self._directory = directory
        self._format_module = format_module
        self._persist_query = persist_query
        self._platform = platform
        self._extension = extension
        self._runtime_module = runtime_module
        self._hash_salt = hash_salt

    @property
    def directory(self) -> CodegenDirectory:
        return self._directory

    @property
    def persists(self) -> bool:
        return self._persist_query is not None

    # ------------------------------------------------------------------
    # Filenames
    # ------------------------------------------------------------------

    def artifact_filename(self, name: str) -> str:
        """``<name>.graphql[.<platform>].<extension>``."""
        module_name = f"{name}.graphql"
        if self._platform:
            module_name = f"{module_name}.{self._platform}"
        return f"{module_name}.{self._extension}"

    @staticmethod
    def query_map_filename(name: str) -> str:
        return f"{name}.queryMap.json"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def write(
        self,
        node: DocumentNode,
        type_text: str = "",
        source_hash: str = "",
        *,
        is_current: Callable[[], bool] | None = None,
    ) -> WriteResult:
        """Write ``node``'s artifact if its content changed.

        Args:
            node: The transformed document.
            type_text: Generated type definitions for the document.
            source_hash: Hash of the originating source file.
            is_current: Checked right before committing; returning ``False``
                aborts the write (the job was superseded).

        Returns:
            A :class:`WriteResult` describing the decision.

        Raises:
            PersistError: If the persistence adapter fails.
            ArtifactIOError: If the previous artifact cannot be read or the
                new one cannot be written.
        """
        node = with_operation_text(node)
        filename = self.artifact_filename(node.name)
        map_filename = self.query_map_filename(node.name)
        content_hash = compute_hash(node, type_text, self.persists, self._hash_salt)

        if extract_hash(self._directory.read(filename)) == content_hash:
            self._directory.mark_unchanged(filename)
            if self.persists:
                self._directory.mark_unchanged(map_filename)
            logger.debug("artifact_unchanged", document=node.name, path=filename)
            return WriteResult(node.name, "unchanged", content_hash)

        if self._directory.only_validate:
            self._directory.mark_updated(filename)
            if self.persists:
                self._directory.mark_updated(map_filename)
            logger.info("artifact_would_update", document=node.name, path=filename)
            return WriteResult(node.name, "would_update", content_hash)

        persisted = PersistResult(node)
        if self._persist_query is not None:
            persisted = await persist_document(node, self._persist_query)

        if is_current is not None and not is_current():
            logger.info("artifact_superseded", document=node.name, path=filename)
            return WriteResult(node.name, "superseded", content_hash)

        content = self._format_module(
            ModuleSpec(
                module_name=f"{node.name}.graphql",
                document_type=node.kind,
                doc_text=_doc_text(node),
                concrete_text=serialize_node(persisted.node),
                type_text=type_text,
                hash=format_hash_marker(content_hash),
                dev_only=persisted.dev_only,
                runtime_module=self._runtime_module,
                source_hash=source_hash,
            )
        )
        self._directory.write_file(filename, content)
        query_map = persisted.query_map or None
        if self.persists and query_map:
            self._directory.write_file(map_filename, json.dumps(query_map, indent=2))

        logger.info("artifact_written", document=node.name, path=filename, hash=content_hash)
        artifact = GeneratedArtifact(
            name=node.name,
            path=filename,
            content=content,
            hash=content_hash,
            query_map=query_map,
            dev_only=persisted.dev_only,
        )
        return WriteResult(node.name, "written", content_hash, artifact, persisted.node)


def with_operation_text(node: DocumentNode) -> DocumentNode:
    """Fill in ``text`` for operations that have neither text nor a persisted id."""
    if isinstance(node, Request):
        if node.text is None and node.id is None:
            return node.model_copy(update={"text": print_document(node)})
        return node
    if isinstance(node, BatchRequest):
        requests = [with_operation_text(r) for r in node.requests]
        return node.model_copy(update={"requests": requests})
    return node


def _doc_text(node: DocumentNode) -> str | None:
    if isinstance(node, Request):
        return node.text
    if isinstance(node, BatchRequest):
        return "\n\n".join(r.text for r in node.requests if r.text)
    return None
