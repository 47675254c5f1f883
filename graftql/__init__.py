"""graftql – compile GraphQL templates embedded in source files.

Extract, transform, and write only what changed.

Public API
----------
``compile_and_write``
    Run the registered IR transforms over a set of parsed documents and write
    one artifact per document, skipping artifacts whose content hash did not
    change.

``transform_documents``
    Build a ``CompilerContext`` and apply the transforms only.

Re-exported types
-----------------
``TypeSystem``, ``CompilerContext``, the IR node types, ``TagCache``,
``SourceModuleParser``, ``ArtifactWriter``, ``CompilerConfig`` and all error
classes.

Extensibility
-------------
New IR transforms can be registered via::

    from graftql.compile.registry import TransformRegistry

    @TransformRegistry.register("strip_client_fields")
    def strip_client_fields(context):
        ...

and enabled by name through ``CompilerConfig.transforms`` (passed as
``config=``) or the ``transforms`` argument of ``compile_and_write``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from graftql.codegen.directory import CodegenDirectory
from graftql.codegen.runner import ArtifactJob, ArtifactWriteScheduler, WriteReport
from graftql.codegen.writer import ArtifactWriter, GeneratedArtifact, WriteResult
from graftql.compile.context import CompilerContext, DocumentNode
from graftql.compile.registry import TransformRegistry
from graftql.config import CompilerConfig, WriterConfig
from graftql.errors import (
    ArtifactIOError,
    CompilationError,
    ConfigError,
    GraftQLError,
    IOFailure,
    ParseError,
    PersistError,
    PreconditionViolation,
    SchemaAmbiguityError,
    SourceIOError,
)
from graftql.extract.source_parser import ParseReport, SourceModuleParser
from graftql.extract.tag_cache import TagCache
from graftql.extract.tags import ExtractedTag, SourceFile, TagFinderOptions, find_graphql_tags
from graftql.ir.metadata import Metadata
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
    VariableDefinition,
)
from graftql.ir.printer import print_document
from graftql.schema.type_system import FieldInfo, TypeInfo, TypeSystem
from graftql.transform import requisite_fields  # noqa: F401  (registers "requisite_fields")

DEFAULT_TRANSFORMS: tuple[str, ...] = ("requisite_fields",)

__all__ = [
    # Core pipeline
    "compile_and_write",
    "transform_documents",
    "DEFAULT_TRANSFORMS",
    # Schema types
    "TypeSystem",
    "TypeInfo",
    "FieldInfo",
    # IR
    "Argument",
    "BatchRequest",
    "Condition",
    "Fragment",
    "FragmentSpread",
    "InlineFragment",
    "LinkedField",
    "Metadata",
    "Request",
    "ScalarField",
    "VariableDefinition",
    "print_document",
    # Contexts
    "CompilerContext",
    "TransformRegistry",
    # Extraction
    "ExtractedTag",
    "ParseReport",
    "SourceFile",
    "SourceModuleParser",
    "TagCache",
    "TagFinderOptions",
    "find_graphql_tags",
    # Codegen
    "ArtifactJob",
    "ArtifactWriteScheduler",
    "ArtifactWriter",
    "CodegenDirectory",
    "GeneratedArtifact",
    "WriteReport",
    "WriteResult",
    # Config
    "CompilerConfig",
    "WriterConfig",
    # Errors
    "GraftQLError",
    "SchemaAmbiguityError",
    "ParseError",
    "PreconditionViolation",
    "IOFailure",
    "SourceIOError",
    "ArtifactIOError",
    "PersistError",
    "ConfigError",
    "CompilationError",
]


def transform_documents(
    documents: Iterable[DocumentNode],
    schema: TypeSystem,
    transforms: Sequence[str] | None = None,
    *,
    config: CompilerConfig | None = None,
) -> CompilerContext:
    """Build a compiler context and run the named transforms over it.

    ``transforms`` wins over ``config.transforms``; with neither,
    ``DEFAULT_TRANSFORMS`` run.

    Raises:
        CompilationError: On duplicate document names or unknown transforms.
        SchemaAmbiguityError: If the schema's ``Node`` interface is ambiguous.
    """
    if transforms is None:
        transforms = config.transforms if config is not None else DEFAULT_TRANSFORMS
    context = CompilerContext.from_documents(schema, documents)
    return TransformRegistry.apply(context, transforms)


async def compile_and_write(
    documents: Iterable[DocumentNode],
    schema: TypeSystem,
    writer: ArtifactWriter,
    *,
    config: CompilerConfig | None = None,
    type_generator: Callable[[DocumentNode], str] | None = None,
    transforms: Sequence[str] | None = None,
    source_hashes: dict[str, str] | None = None,
    max_concurrency: int | None = None,
) -> WriteReport:
    """Transform ``documents`` and write one artifact per document.

    This is the main entry point for the graftql pipeline::

        config = CompilerConfig(transforms=["requisite_fields"])
        writer = config.build_writer("src/app")
        report = await graftql.compile_and_write(documents, schema, writer, config=config)
        if report.would_update:
            sys.exit(1)

    Args:
        documents: Parsed documents (see ``SourceModuleParser``).
        schema: The validated type system.
        writer: Artifact writer (carries output directory and persistence).
        config: Run options; supplies ``transforms`` and
            ``writer.max_concurrency`` when those arguments are omitted.
        type_generator: Optional external generator producing type text for a
            transformed document.
        transforms: Registered transform names to apply, in order.
        source_hashes: Optional source-file hash per document name.
        max_concurrency: Maximum number of artifact writes in flight.

    Returns:
        ``WriteReport`` with per-document results and per-document errors.

    Raises:
        ConfigError: If the resolved ``max_concurrency`` is not positive.
        SchemaAmbiguityError: If the schema's ``Node`` interface is ambiguous.
        CompilationError: On duplicate documents or inconsistent IR.
    """
    if max_concurrency is None:
        max_concurrency = config.writer.max_concurrency if config is not None else 8
    if max_concurrency < 1:
        raise ConfigError(
            f"max_concurrency must be positive, got {max_concurrency}.",
            option="max_concurrency",
        )
    context = transform_documents(documents, schema, transforms, config=config)
    source_hashes = source_hashes or {}
    jobs = [
        ArtifactJob(
            node=document,
            type_text=type_generator(document) if type_generator else "",
            source_hash=source_hashes.get(document.name, ""),
        )
        for document in context.documents()
    ]
    scheduler = ArtifactWriteScheduler(writer, max_concurrency=max_concurrency)
    return await scheduler.write_all(jobs)
