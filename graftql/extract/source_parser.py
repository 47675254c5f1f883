"""Turn source files into IR documents.

``SourceModuleParser`` glues the tag cache to the external GraphQL parser:

1. :meth:`SourceModuleParser.file_filter` keeps only files containing the
   trigger substring (the tag cache refuses anything else).
2. :meth:`SourceModuleParser.parse_file` reads a file, extracts its templates
   through the cache, and hands each template to the parser.
3. :meth:`SourceModuleParser.parse_files` does this for a batch, collecting
   per-file failures instead of aborting on the first one.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from graftql.compile.context import DocumentNode
from graftql.errors import ParseError, PreconditionViolation, SourceIOError
from graftql.extract.tag_cache import TagCache
from graftql.extract.tags import ExtractedTag, SourceFile, TagFinderOptions

logger = structlog.get_logger(__name__)

#: ``(template, source_name, tag) -> documents``; raises ParseError on bad input.
QueryParser = Callable[[str, str, ExtractedTag], list[DocumentNode]]


@dataclass
class ParseReport:
    """Result of parsing a batch of source files.

    Attributes:
        documents: Documents from every file that parsed cleanly.
        errors: Per-file failures keyed by relative path.
    """

    documents: list[DocumentNode] = field(default_factory=list)
    errors: dict[str, ParseError | SourceIOError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class SourceModuleParser:
    """Parses embedded GraphQL templates out of application source files.

    Args:
        tag_cache: Shared cache wrapping the tag finder.
        parse: External GraphQL parser.
        options: Tag finder options used for every file.
    """

    def __init__(
        self,
        tag_cache: TagCache,
        parse: QueryParser,
        *,
        options: TagFinderOptions | None = None,
    ) -> None:
        self._tag_cache = tag_cache
        self._parse = parse
        self._options = options or TagFinderOptions()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def file_filter(self, base_dir: Path | str) -> Callable[[SourceFile], bool]:
        """Return a predicate selecting files that contain the trigger substring."""

        def accepts(file: SourceFile) -> bool:
            if not file.exists:
                return False
            return self._tag_cache.trigger in _read_text(base_dir, file)

        return accepts

    def parse_file(self, base_dir: Path | str, file: SourceFile) -> list[DocumentNode]:
        """Parse every template in ``file``.

        Raises:
            SourceIOError: If the file cannot be read.
            PreconditionViolation: If the file was not pre-filtered.
            ParseError: If a template fails to parse or holds no definitions.
        """
        if not file.exists:
            raise PreconditionViolation(
                f"SourceModuleParser: called with non-existent file '{file.rel_path}'."
            )
        text = _read_text(base_dir, file)
        if self._tag_cache.trigger not in text:
            raise PreconditionViolation(
                "SourceModuleParser: files should be filtered before being passed to "
                f"the parser, got unfiltered file '{file.rel_path}'."
            )

        documents: list[DocumentNode] = []
        for tag in self._tag_cache.get_or_compute(file, text, self._options, base_dir):
            definitions = self._parse(tag.template, file.rel_path, tag)
            if not definitions:
                raise ParseError(
                    "Expected GraphQL text to contain at least one definition "
                    f"(fragment, mutation, query, subscription), got `{tag.template}`.",
                    source=file.rel_path,
                    line=tag.line,
                    column=tag.column,
                )
            documents.extend(definitions)
        return documents

    def parse_files(
        self, base_dir: Path | str, files: Iterable[SourceFile]
    ) -> ParseReport:
        """Parse a batch of files, collecting per-file failures.

        Duplicate document names, across files or within one file, are
        reported against the file that introduced the second definition.
        """
        report = ParseReport()
        seen: dict[str, str] = {}
        for file in files:
            try:
                documents = self.parse_file(base_dir, file)
                local: set[str] = set()
                for document in documents:
                    if document.name in seen:
                        raise ParseError(
                            f"Document '{document.name}' is already defined in "
                            f"'{seen[document.name]}'.",
                            source=file.rel_path,
                        )
                    if document.name in local:
                        raise ParseError(
                            f"Document '{document.name}' is defined more than once.",
                            source=file.rel_path,
                        )
                    local.add(document.name)
            except (ParseError, SourceIOError) as exc:
                logger.warning("source_parse_failed", path=file.rel_path, error=str(exc))
                report.errors[file.rel_path] = exc
                continue
            for document in documents:
                seen[document.name] = file.rel_path
            report.documents.extend(documents)
        return report


def _read_text(base_dir: Path | str, file: SourceFile) -> str:
    path = Path(base_dir) / file.rel_path
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceIOError(str(path), str(exc)) from exc
