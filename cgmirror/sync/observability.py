"""Structured log events for synchronisation runs.

Events are emitted as ``[event] key=value`` lines so a log aggregator can
parse them without a dedicated metrics pipeline.
"""

from __future__ import annotations

import enum
import typing as typ

from sqlalchemy.exc import SQLAlchemyError

from cgmirror.catalog.errors import CatalogError
from cgmirror.logging import get_logger, log_error, log_info
from cgmirror.mirror.errors import GitCommandError, MirrorError, ProjectionError

from .models import SyncOutcome

if typ.TYPE_CHECKING:
    import datetime as dt

    from .models import RunReport, SyncResult

logger = get_logger(__name__)


class SyncEventType(enum.StrEnum):
    """Structured log event types for synchronisation runs."""

    RUN_STARTED = "sync.run.started"
    RUN_COMPLETED = "sync.run.completed"
    REPOSITORY_COMPLETED = "sync.repository.completed"
    REPOSITORY_FAILED = "sync.repository.failed"


class ErrorCategory(enum.StrEnum):
    """Coarse failure categories for alert routing."""

    GIT = "git"
    CATALOG = "catalog"
    PROJECTION = "projection"
    FILESYSTEM = "filesystem"
    UNKNOWN = "unknown"


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (MirrorError, ErrorCategory.GIT),
    (GitCommandError, ErrorCategory.GIT),
    (CatalogError, ErrorCategory.CATALOG),
    (SQLAlchemyError, ErrorCategory.CATALOG),
    (ProjectionError, ErrorCategory.PROJECTION),
    (OSError, ErrorCategory.FILESYSTEM),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception, unwrapping repository-level wrappers."""
    cause = getattr(exc, "cause", None)
    if isinstance(cause, BaseException):
        exc = cause

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


class SyncEventLogger:
    """Emit structured synchronisation events through femtologging."""

    def log_run_started(self, account: str, repository_count: int) -> None:
        """Log the start of a run."""
        log_info(
            logger,
            "[%s] account=%s repositories=%d",
            SyncEventType.RUN_STARTED,
            account,
            repository_count,
        )

    def log_repository_completed(self, result: SyncResult) -> None:
        """Log a repository that finished without error."""
        log_info(
            logger,
            "[%s] repo=%s repo_id=%d outcome=%s reason=%s",
            SyncEventType.REPOSITORY_COMPLETED,
            result.name,
            result.repo_id,
            result.outcome,
            result.reason or "-",
        )

    def log_repository_failed(self, result: SyncResult) -> None:
        """Log a failed repository with its error category."""
        error = result.error
        log_error(
            logger,
            "[%s] repo=%s repo_id=%d error_type=%s error_category=%s "
            "error_message=%s",
            SyncEventType.REPOSITORY_FAILED,
            result.name,
            result.repo_id,
            type(error.cause).__name__ if error is not None else "-",
            categorize_error(error) if error is not None else ErrorCategory.UNKNOWN,
            str(error.cause) if error is not None else "-",
        )

    def log_run_completed(self, report: RunReport, duration: dt.timedelta) -> None:
        """Log the end of a run with per-outcome counts."""
        counts = report.counts
        log_info(
            logger,
            "[%s] account=%s duration_seconds=%.3f created=%d refreshed=%d "
            "unchanged=%d skipped=%d failed=%d",
            SyncEventType.RUN_COMPLETED,
            report.account,
            duration.total_seconds(),
            counts[SyncOutcome.CREATED],
            counts[SyncOutcome.REFRESHED],
            counts[SyncOutcome.UNCHANGED],
            counts[SyncOutcome.SKIPPED],
            counts[SyncOutcome.FAILED],
        )
