"""Concurrent artifact writing.

Documents are independent, so their artifacts are written concurrently:

* an ``asyncio.Semaphore`` bounds how many writes run at once;
* an ``asyncio.Lock`` per artifact path serializes writes to the same file;
* every job gets a generation number per document.  Scheduling a newer job
  for the same document supersedes older in-flight ones, which abort right
  before committing (last write wins);
* a persistence or IO failure is recorded against its document only, and
  sibling documents still complete.
"""
from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from graftql.codegen.writer import ArtifactWriter, WriteResult
from graftql.compile.context import DocumentNode
from graftql.errors import IOFailure, PersistError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ArtifactJob:
    """One document to write.

    Attributes:
        node: The transformed document.
        type_text: Generated type definitions.
        source_hash: Hash of the originating source file.
    """

    node: DocumentNode
    type_text: str = ""
    source_hash: str = ""


@dataclass
class WriteReport:
    """Outcome of :meth:`ArtifactWriteScheduler.write_all`.

    Attributes:
        results: Write results keyed by document name.
        errors: Per-document failures keyed by document name.
    """

    results: dict[str, WriteResult] = field(default_factory=dict)
    errors: dict[str, PersistError | IOFailure] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def would_update(self) -> bool:
        """True when validate-only mode found out-of-date artifacts."""
        return any(r.status == "would_update" for r in self.results.values())

    def names_with_status(self, status: str) -> list[str]:
        return [name for name, r in self.results.items() if r.status == status]


class ArtifactWriteScheduler:
    """Schedules :class:`ArtifactWriter` calls with bounded concurrency.

    Args:
        writer: The artifact writer.
        max_concurrency: Maximum number of writes in flight.
    """

    def __init__(self, writer: ArtifactWriter, *, max_concurrency: int = 8) -> None:
        self._writer = writer
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._path_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._generations: defaultdict[str, int] = defaultdict(int)

    def supersede(self, name: str) -> int:
        """Invalidate in-flight writes of ``name``; return the new generation."""
        self._generations[name] += 1
        return self._generations[name]

    async def write(self, job: ArtifactJob) -> WriteResult:
        """Write one job, superseding any earlier job for the same document.

        Raises:
            PersistError: If persistence fails for this document.
            ArtifactIOError: If the artifact cannot be written.
        """
        name = job.node.name
        generation = self.supersede(name)

        def is_current() -> bool:
            return self._generations[name] == generation

        async with self._semaphore:
            async with self._path_locks[self._writer.artifact_filename(name)]:
                if not is_current():
                    logger.debug("artifact_job_skipped", document=name)
                    return WriteResult(name, "superseded", "")
                return await self._writer.write(
                    job.node, job.type_text, job.source_hash, is_current=is_current
                )

    async def write_all(self, jobs: Iterable[ArtifactJob]) -> WriteReport:
        """Write every job concurrently and collect per-document outcomes.

        Raises:
            GraftQLError: Any failure other than a per-document persistence
                or IO failure, after all jobs have settled.
        """
        jobs = list(jobs)
        outcomes = await asyncio.gather(
            *(self.write(job) for job in jobs), return_exceptions=True
        )
        report = WriteReport()
        fatal: BaseException | None = None
        for job, outcome in zip(jobs, outcomes):
            name = job.node.name
            if isinstance(outcome, (PersistError, IOFailure)):
                logger.warning("artifact_write_failed", document=name, error=str(outcome))
                report.errors[name] = outcome
            elif isinstance(outcome, BaseException):
                fatal = fatal or outcome
            elif outcome.status != "superseded" or name not in report.results:
                report.results[name] = outcome
        if fatal is not None:
            raise fatal
        return report
