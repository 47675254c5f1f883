"""graftql codegen layer: hashing, persistence, and artifact writing."""
from graftql.codegen.directory import ChangeSet, CodegenDirectory, is_generated_file
from graftql.codegen.formatter import FormatModule, ModuleSpec, format_python_module
from graftql.codegen.hashing import (
    HASH_MARKER,
    HASH_SALT,
    compute_hash,
    extract_hash,
    serialize_node,
)
from graftql.codegen.persist import PersistQuery, PersistResult, persist_document
from graftql.codegen.runner import ArtifactJob, ArtifactWriteScheduler, WriteReport
from graftql.codegen.writer import (
    ArtifactWriter,
    GeneratedArtifact,
    WriteResult,
    WriteStatus,
    with_operation_text,
)

__all__ = [
    "ChangeSet",
    "CodegenDirectory",
    "is_generated_file",
    "FormatModule",
    "ModuleSpec",
    "format_python_module",
    "HASH_MARKER",
    "HASH_SALT",
    "compute_hash",
    "extract_hash",
    "serialize_node",
    "PersistQuery",
    "PersistResult",
    "persist_document",
    "ArtifactJob",
    "ArtifactWriteScheduler",
    "WriteReport",
    "ArtifactWriter",
    "GeneratedArtifact",
    "WriteResult",
    "WriteStatus",
    "with_operation_text",
]
