"""Run the synchroniser across every repository of an account."""

from __future__ import annotations

import asyncio
import typing as typ

from cgmirror.common.time import utcnow

from .errors import RepositorySyncError, SyncRunError
from .models import RunReport, SyncResult
from .observability import SyncEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from cgmirror.github.models import RemoteRepository

    from .synchronizer import Synchronizer

# Each worker may hold a git subprocess and a database connection.
DEFAULT_CONCURRENCY = 8


def _process_gathered_results(
    repos: cabc.Sequence[RemoteRepository],
    gathered: list[SyncResult | BaseException],
    report: RunReport,
    events: SyncEventLogger,
) -> None:
    """Record gathered results, converting stray exceptions into failures."""
    for repo, result in zip(repos, gathered, strict=True):
        if isinstance(result, Exception):
            result = SyncResult.failed(
                repo.id, repo.name, RepositorySyncError(repo.name, result)
            )
        elif isinstance(result, BaseException):
            # Re-raise system-level exceptions (e.g., KeyboardInterrupt) immediately
            raise result

        report.add(result)
        if result.error is not None:
            events.log_repository_failed(result)
        else:
            events.log_repository_completed(result)


class Orchestrator:
    """Synchronise many repositories concurrently with bounded parallelism.

    Every repository is processed to completion even when others fail.
    There is no run-level timeout.
    """

    def __init__(
        self,
        synchronizer: Synchronizer,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        events: SyncEventLogger | None = None,
    ) -> None:
        """Configure the orchestrator with a synchroniser and worker limit."""
        if concurrency < 1:
            msg = f"concurrency must be at least 1, got {concurrency}"
            raise ValueError(msg)
        self._synchronizer = synchronizer
        self._concurrency = concurrency
        self._events = events or SyncEventLogger()

    async def run(
        self, account: str, repos: cabc.Sequence[RemoteRepository]
    ) -> RunReport:
        """Synchronise ``repos`` and return a report of every outcome."""
        report = RunReport(account=account)
        started_at = utcnow()
        self._events.log_run_started(account, len(repos))

        semaphore = asyncio.Semaphore(self._concurrency)

        async def bounded_sync(repo: RemoteRepository) -> SyncResult:
            async with semaphore:
                return await self._synchronizer.sync(repo)

        gathered = await asyncio.gather(
            *(bounded_sync(repo) for repo in repos), return_exceptions=True
        )
        _process_gathered_results(repos, gathered, report, self._events)

        self._events.log_run_completed(report, utcnow() - started_at)
        return report

    async def run_or_raise(
        self, account: str, repos: cabc.Sequence[RemoteRepository]
    ) -> RunReport:
        """Like :meth:`run`, but raise when any repository failed.

        Raises
        ------
        SyncRunError
            Carrying every per-repository error from the run.

        """
        report = await self.run(account, repos)
        if not report.ok:
            raise SyncRunError(report.errors)
        return report
