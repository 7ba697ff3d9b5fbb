"""Outcomes of synchronising repositories."""

from __future__ import annotations

import collections
import dataclasses
import enum
import typing as typ

if typ.TYPE_CHECKING:
    from .errors import RepositorySyncError


class SyncOutcome(enum.StrEnum):
    """What happened to one repository during a run."""

    CREATED = "created"
    REFRESHED = "refreshed"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(enum.StrEnum):
    """Why a repository was skipped."""

    OVERSIZE = "oversize"
    RACE = "race"


@dataclasses.dataclass(frozen=True, slots=True)
class SyncResult:
    """Outcome for a single repository.

    ``reason`` is set only for skipped repositories and ``error`` only for
    failed ones.
    """

    repo_id: int
    name: str
    outcome: SyncOutcome
    reason: SkipReason | None = None
    error: RepositorySyncError | None = None

    @classmethod
    def skipped(cls, repo_id: int, name: str, reason: SkipReason) -> SyncResult:
        """Return a skipped result with ``reason``."""
        return cls(repo_id, name, SyncOutcome.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, repo_id: int, name: str, error: RepositorySyncError) -> SyncResult:
        """Return a failed result carrying ``error``."""
        return cls(repo_id, name, SyncOutcome.FAILED, error=error)


@dataclasses.dataclass(slots=True)
class RunReport:
    """Summary of a complete synchronisation run.

    Results are recorded in the order of the repository listing, whatever
    order the workers finished in.
    """

    account: str
    results: list[SyncResult] = dataclasses.field(default_factory=list)

    def add(self, result: SyncResult) -> None:
        """Record the outcome of one repository."""
        self.results.append(result)

    @property
    def counts(self) -> dict[SyncOutcome, int]:
        """Return the number of repositories per outcome."""
        tally = collections.Counter(result.outcome for result in self.results)
        return {outcome: tally.get(outcome, 0) for outcome in SyncOutcome}

    @property
    def errors(self) -> list[RepositorySyncError]:
        """Return every per-repository error in the run."""
        return [result.error for result in self.results if result.error is not None]

    @property
    def ok(self) -> bool:
        """Return True when no repository failed."""
        return not self.errors
