"""Compiler configuration.

``CompilerConfig`` gathers every option the pipeline needs and builds the
long-lived components from them::

    config = CompilerConfig(
        cache_dir=".graftql-cache",
        writer=WriterConfig(extension="py", persist_queries=True),
    )
    tag_cache = config.build_tag_cache()
    writer = config.build_writer("src/app", persist_query=upload_query)

Config objects are plain dataclasses; build one per run and pass it down.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from graftql.codegen.directory import CodegenDirectory
from graftql.codegen.formatter import FormatModule, format_python_module
from graftql.codegen.persist import PersistQuery
from graftql.codegen.writer import ArtifactWriter
from graftql.errors import ConfigError
from graftql.extract.tag_cache import TagCache
from graftql.extract.tags import TagFinder, TagFinderOptions, find_graphql_tags


@dataclass
class WriterConfig:
    """Artifact output options.

    Attributes:
        extension: Artifact file extension.
        platform: Optional platform qualifier inserted into filenames.
        output_dir: Directory (relative to the source root) for artifacts.
        only_validate: Report out-of-date artifacts instead of writing them.
        persist_queries: Replace operation text with persisted ids.
        runtime_module: Module generated code refers to for runtime types.
        max_concurrency: Maximum number of artifact writes in flight.
    """

    extension: str = "py"
    platform: str | None = None
    output_dir: str = "__generated__"
    only_validate: bool = False
    persist_queries: bool = False
    runtime_module: str = "graftql"
    max_concurrency: int = 8


@dataclass
class CompilerConfig:
    """Options for one compile run.

    Attributes:
        trigger: Substring a source file must contain to be parsed.
        validate_names: Enforce module-prefixed definition names.
        cache_name: Tag cache name (store directory prefix).
        cache_version: Tag cache format tag; bump to invalidate the store.
        cache_dir: Directory for the persisted tag cache (``None`` = memory only).
        transforms: Registered IR transforms to apply, in order.
        writer: Artifact output options.
    """

    trigger: str = "graphql"
    validate_names: bool = True
    cache_name: str = "graftql.tags"
    cache_version: str = "v1"
    cache_dir: str | None = None
    transforms: list[str] = field(default_factory=lambda: ["requisite_fields"])
    writer: WriterConfig = field(default_factory=WriterConfig)

    def tag_finder_options(self) -> TagFinderOptions:
        return TagFinderOptions(validate_names=self.validate_names)

    def build_tag_cache(self, tag_finder: TagFinder = find_graphql_tags) -> TagCache:
        """Create the tag cache for this run.

        Raises:
            ConfigError: If ``trigger`` is empty.
        """
        if not self.trigger:
            raise ConfigError("trigger must be a non-empty string.", option="trigger")
        return TagCache(
            tag_finder,
            name=self.cache_name,
            version=self.cache_version,
            store_dir=self.cache_dir,
            trigger=self.trigger,
        )

    def build_writer(
        self,
        base_dir: Path | str,
        *,
        persist_query: PersistQuery | None = None,
        format_module: FormatModule = format_python_module,
    ) -> ArtifactWriter:
        """Create the artifact writer for ``base_dir / writer.output_dir``.

        Raises:
            ConfigError: If ``persist_queries`` is set without an adapter, or
                ``max_concurrency`` is not positive.
        """
        options = self.writer
        if options.persist_queries and persist_query is None:
            raise ConfigError(
                "persist_queries is enabled but no persist_query adapter was given.",
                option="persist_queries",
            )
        if options.max_concurrency < 1:
            raise ConfigError(
                f"max_concurrency must be positive, got {options.max_concurrency}.",
                option="max_concurrency",
            )
        directory = CodegenDirectory(
            Path(base_dir) / options.output_dir, only_validate=options.only_validate
        )
        return ArtifactWriter(
            directory,
            format_module,
            persist_query=persist_query if options.persist_queries else None,
            platform=options.platform,
            extension=options.extension,
            runtime_module=options.runtime_module,
        )
