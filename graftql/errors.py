"""Custom exception hierarchy for graftql.

All public errors inherit from GraftQLError so callers can catch the base
class for any graftql-specific failure.

Errors fall into two groups:

* **Run-fatal** – :class:`SchemaAmbiguityError`, :class:`PreconditionViolation`
  and :class:`CompilationError` mean the compile cannot produce a trustworthy
  result and should abort the whole run.
* **Per-item** – :class:`ParseError`, :class:`SourceIOError`,
  :class:`ArtifactIOError` and :class:`PersistError` are scoped to a single
  source file or document.  They are collected by the parser and the write
  scheduler so sibling work can finish; the orchestration layer decides
  whether to halt.
"""
from __future__ import annotations

from typing import Any


class GraftQLError(Exception):
    """Base exception for all graftql errors."""

    code = "GRAFTQL_ERROR"

    def details(self) -> dict[str, Any]:
        """Returns structured context for this error."""
        return {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response suitable for reporting."""
        return {
            "error": self.code,
            "message": str(self),
            "details": self.details(),
        }


class SchemaAmbiguityError(GraftQLError):
    """Raised when the node-like interface does not declare exactly one ID field.

    Args:
        interface: Name of the node-like interface (usually ``Node``).
        fields: Names of the ``ID``-typed fields found on it.
    """

    code = "SCHEMA_AMBIGUITY"

    def __init__(self, interface: str, fields: list[str]) -> None:
        if fields:
            message = (
                f"Expected interface '{interface}' to declare exactly one field of "
                f"type ID, found {len(fields)}: {', '.join(fields)}."
            )
        else:
            message = f"Expected interface '{interface}' to declare a field of type ID."
        super().__init__(message)
        self.interface = interface
        self.fields = fields

    def details(self) -> dict[str, Any]:
        return {"interface": self.interface, "fields": self.fields}


class ParseError(GraftQLError):
    """Raised when an embedded template cannot be turned into IR documents.

    Args:
        message: Human-readable description.
        source: Relative path of the file the template came from.
        line: 1-based line of the offending template, when known.
        column: 1-based column of the offending template, when known.
    """

    code = "PARSE_ERROR"

    def __init__(
        self,
        message: str,
        source: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.line = line
        self.column = column

    def details(self) -> dict[str, Any]:
        return {"source": self.source, "line": self.line, "column": self.column}


class PreconditionViolation(GraftQLError):
    """Raised when an internal API is called with input it must never receive.

    This signals a programming error in the caller (for example asking the
    tag cache to extract from a file that was not pre-filtered), not a
    recoverable condition.
    """

    code = "PRECONDITION_VIOLATION"


class IOFailure(GraftQLError):
    """Base class for filesystem failures scoped to a single path.

    Args:
        path: The path that could not be read or written.
        reason: The underlying OS error message.
    """

    code = "IO_FAILURE"
    action = "access"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Unable to {self.action} '{path}': {reason}")
        self.path = path
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"path": self.path, "reason": self.reason}


class SourceIOError(IOFailure):
    """Raised when a source file cannot be read."""

    code = "SOURCE_IO_ERROR"
    action = "read source file"


class ArtifactIOError(IOFailure):
    """Raised when a generated artifact cannot be read or written."""

    code = "ARTIFACT_IO_ERROR"
    action = "write artifact"


class PersistError(GraftQLError):
    """Raised when the persisted-query adapter fails for a document.

    Args:
        document: Name of the document whose text could not be persisted.
        reason: Description of the underlying failure.
    """

    code = "PERSIST_ERROR"

    def __init__(self, document: str, reason: str) -> None:
        super().__init__(f"Failed to persist query text for '{document}': {reason}")
        self.document = document
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"document": self.document, "reason": self.reason}


class ConfigError(GraftQLError):
    """Raised when a CompilerConfig is misconfigured.

    Detected when the config builds its components, before any file is
    read, so the developer gets an actionable message up front.

    Args:
        message: Human-readable description.
        option: The offending option name.
    """

    code = "CONFIG_ERROR"

    def __init__(self, message: str, option: str | None = None) -> None:
        super().__init__(message)
        self.option = option

    def details(self) -> dict[str, Any]:
        return {"option": self.option}


class CompilationError(GraftQLError):
    """Raised when the IR is internally inconsistent.

    Args:
        message: Human-readable description.
        document: The document being processed when the error occurred.
    """

    code = "COMPILATION_ERROR"

    def __init__(self, message: str, document: str | None = None) -> None:
        super().__init__(message)
        self.document = document

    def details(self) -> dict[str, Any]:
        return {"document": self.document}
