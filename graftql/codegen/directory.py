"""Output directory for generated artifacts.

``CodegenDirectory`` is the only component that touches the output
filesystem.  It reads previous artifacts, writes new ones atomically
(temp file + rename, so an observer never sees a partial file), and records
what changed so callers can report or fail on it.
"""
from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from graftql.errors import ArtifactIOError

logger = structlog.get_logger(__name__)


def is_generated_file(filename: str) -> bool:
    """True for files graftql generates (artifacts and query maps)."""
    return ".graphql." in filename or filename.endswith(".queryMap.json")


@dataclass
class ChangeSet:
    """Files touched in one run, by outcome."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)


class CodegenDirectory:
    """A directory of generated files.

    Args:
        root: Directory the artifacts live in.  Created on first write.
        only_validate: When ``True`` nothing is written or deleted; changes
            are only recorded.
    """

    def __init__(self, root: Path | str, *, only_validate: bool = False) -> None:
        self._root = Path(root)
        self._only_validate = only_validate
        self._changes = ChangeSet()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def only_validate(self) -> bool:
        return self._only_validate

    @property
    def changes(self) -> ChangeSet:
        return self._changes

    def has_changes(self) -> bool:
        c = self._changes
        return bool(c.created or c.updated or c.deleted)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read(self, filename: str) -> str | None:
        """Return the contents of ``filename``, or ``None`` if it does not exist.

        Raises:
            ArtifactIOError: If the file exists but cannot be read.
        """
        path = self._root / filename
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ArtifactIOError(str(path), str(exc)) from exc

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write_file(self, filename: str, content: str) -> None:
        """Write ``content`` to ``filename`` unless it is already there.

        Raises:
            ArtifactIOError: If the file cannot be written.
        """
        path = self._root / filename
        existing = self.read(filename)
        if existing == content:
            self.mark_unchanged(filename)
            return
        if existing is None:
            self._changes.created.append(filename)
        else:
            self._changes.updated.append(filename)
        if self._only_validate:
            return
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=f".{filename}.", suffix=".tmp")
        except OSError as exc:
            raise ArtifactIOError(str(path), str(exc)) from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_name, path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise ArtifactIOError(str(path), str(exc)) from exc

    def mark_unchanged(self, filename: str) -> None:
        self._changes.unchanged.append(filename)

    def mark_updated(self, filename: str) -> None:
        self._changes.updated.append(filename)

    def delete_extra_files(
        self,
        keep: Iterable[str],
        is_generated: Callable[[str], bool] = is_generated_file,
    ) -> list[str]:
        """Delete generated files that are not in ``keep``.

        Files are only recorded as deleted in validate-only mode.

        Returns:
            The filenames deleted (or that would be deleted).
        """
        if not self._root.is_dir():
            return []
        keep_set = set(keep)
        stale = sorted(
            p.name for p in self._root.iterdir()
            if p.is_file() and is_generated(p.name) and p.name not in keep_set
        )
        for name in stale:
            if not self._only_validate:
                try:
                    (self._root / name).unlink()
                except OSError as exc:
                    raise ArtifactIOError(str(self._root / name), str(exc)) from exc
            logger.info("artifact_deleted", path=name, validate_only=self._only_validate)
            self._changes.deleted.append(name)
        return stale
