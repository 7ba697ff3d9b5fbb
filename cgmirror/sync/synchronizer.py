"""Decide what to do with one remote repository and do it.

For each repository the synchroniser walks a short, strictly sequential
pipeline: size filter, catalog lookup, then either a first-time mirror or a
timestamp comparison that leads to a refresh or to nothing at all. A step
runs only if every earlier step succeeded.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from cgmirror.catalog.errors import (
    CatalogError,
    RecordBusyError,
    RecordExistsError,
    RecordNotFoundError,
)
from cgmirror.catalog.models import CatalogRecord
from cgmirror.logging import get_logger, log_debug, log_info
from cgmirror.mirror.errors import GitCommandError, MirrorError, ProjectionError
from cgmirror.mirror.operator import mirror_path

from .errors import RepositorySyncError
from .models import SkipReason, SyncOutcome, SyncResult

if typ.TYPE_CHECKING:
    from pathlib import Path

    from cgmirror.catalog.service import Catalog
    from cgmirror.github.models import RemoteRepository
    from cgmirror.mirror.operator import MirrorOperator
    from cgmirror.mirror.projection import MetadataProjector

logger = get_logger(__name__)

# GitHub reports sizes in kilobytes of 1000 bytes.
_BYTES_PER_KILOBYTE = 1000

_REPOSITORY_ERRORS = (CatalogError, MirrorError, ProjectionError, GitCommandError)


def is_oversize(size_kilobytes: int, max_size_bytes: int) -> bool:
    """Return True when a repository of ``size_kilobytes`` exceeds the limit."""
    return size_kilobytes * _BYTES_PER_KILOBYTE > max_size_bytes


@dataclasses.dataclass(frozen=True, slots=True)
class SynchronizerConfig:
    """Per-run settings for :class:`Synchronizer`."""

    mirror_root: Path
    max_size_bytes: int | None = None


class Synchronizer:
    """Bring one local mirror and its catalog record up to date."""

    def __init__(
        self,
        catalog: Catalog,
        operator: MirrorOperator,
        projector: MetadataProjector,
        config: SynchronizerConfig,
    ) -> None:
        """Wire the synchroniser to its collaborators."""
        self._catalog = catalog
        self._operator = operator
        self._projector = projector
        self._config = config

    async def sync(self, repo: RemoteRepository) -> SyncResult:
        """Synchronise ``repo`` and report the outcome.

        Catalog, mirror, and projection failures are returned as a
        ``failed`` result naming the repository rather than raised, so one
        broken repository never interrupts the others.
        """
        max_size = self._config.max_size_bytes
        if max_size is not None and is_oversize(repo.size, max_size):
            log_debug(logger, "Skipping %s: %d kB exceeds limit", repo.name, repo.size)
            return SyncResult.skipped(repo.id, repo.name, SkipReason.OVERSIZE)

        try:
            async with self._catalog.claim(repo.id):
                return await self._sync_claimed(repo)
        except (RecordBusyError, RecordExistsError):
            log_info(logger, "Skipping %s: synchronised by another worker", repo.name)
            return SyncResult.skipped(repo.id, repo.name, SkipReason.RACE)
        except _REPOSITORY_ERRORS as exc:
            return SyncResult.failed(
                repo.id, repo.name, RepositorySyncError(repo.name, exc)
            )

    async def _sync_claimed(self, repo: RemoteRepository) -> SyncResult:
        try:
            current = await self._catalog.get(repo.id)
        except RecordNotFoundError:
            await self._create(repo)
            return SyncResult(repo.id, repo.name, SyncOutcome.CREATED)

        if not await self._catalog.is_newer_than(repo.id, repo.effective_updated_at):
            return SyncResult(repo.id, repo.name, SyncOutcome.UNCHANGED)

        await self._refresh(repo, current)
        return SyncResult(repo.id, repo.name, SyncOutcome.REFRESHED)

    async def _create(self, repo: RemoteRepository) -> None:
        path = await self._operator.create(repo, self._config.mirror_root)
        self._projector.project_timestamp(
            path, repo.default_branch, repo.effective_updated_at
        )
        await self._catalog.put(CatalogRecord.from_remote(repo))

    async def _refresh(self, repo: RemoteRepository, current: CatalogRecord) -> None:
        path = mirror_path(self._config.mirror_root, repo)
        await self._operator.refresh(path)

        self._projector.reconcile_description(path, repo.description)

        if current.default_branch != repo.default_branch:
            await self._operator.change_default_branch(path, repo.default_branch)

        self._projector.project_timestamp(
            path, repo.default_branch, repo.effective_updated_at
        )
        await self._catalog.replace(CatalogRecord.from_remote(repo))
