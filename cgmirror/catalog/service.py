"""Catalog of repositories seen by previous synchronisation runs.

The catalog answers one question for the synchroniser: has this repository
changed since we last mirrored it? Each public call runs in its own
transaction. Calls for the same repository identifier are serialised by a
per-identifier lock so that concurrent workers never interleave a
read-modify-write on one record, while calls for different repositories
proceed independently.
"""

from __future__ import annotations

import asyncio
import collections
import contextlib
import typing as typ

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cgmirror.common.time import is_earlier

from .errors import (
    CatalogError,
    RecordBusyError,
    RecordExistsError,
    RecordNotFoundError,
)
from .models import CatalogRecord
from .storage import RepositoryRow

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

SessionFactory: typ.TypeAlias = "async_sessionmaker[AsyncSession]"


def _to_record(row: RepositoryRow) -> CatalogRecord:
    return CatalogRecord(
        id=row.id,
        name=row.name,
        description=row.description,
        default_branch=row.default_branch,
        updated_at=row.updated_at,
    )


class Catalog:
    """Read and write :class:`CatalogRecord` rows keyed by repository id.

    Parameters
    ----------
    session_factory:
        Async session factory bound to a database initialised with
        :func:`cgmirror.catalog.storage.init_catalog_storage`.

    """

    def __init__(self, session_factory: SessionFactory) -> None:
        """Configure the catalog with its session factory."""
        self._session_factory = session_factory
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_users: collections.Counter[int] = collections.Counter()
        self._claimed: set[int] = set()

    @contextlib.asynccontextmanager
    async def _locked(self, repo_id: int) -> cabc.AsyncIterator[None]:
        """Serialise calls for ``repo_id``, dropping the lock once unused."""
        lock = self._locks.setdefault(repo_id, asyncio.Lock())
        self._lock_users[repo_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[repo_id] -= 1
            if not self._lock_users[repo_id]:
                del self._lock_users[repo_id]
                del self._locks[repo_id]

    @contextlib.asynccontextmanager
    async def claim(self, repo_id: int) -> cabc.AsyncIterator[None]:
        """Reserve ``repo_id`` for the calling worker until the block exits.

        Raises
        ------
        RecordBusyError
            If another worker in this process already holds the identifier.

        """
        if repo_id in self._claimed:
            raise RecordBusyError(repo_id)
        self._claimed.add(repo_id)
        try:
            yield
        finally:
            self._claimed.discard(repo_id)

    async def get(self, repo_id: int) -> CatalogRecord:
        """Return the stored record for ``repo_id``.

        Raises
        ------
        RecordNotFoundError
            If the repository has never been stored.
        CatalogError
            If the database cannot be read.

        """
        async with self._locked(repo_id):
            try:
                async with self._session_factory() as session:
                    row = await session.get(RepositoryRow, repo_id)
                    if row is None:
                        raise RecordNotFoundError(repo_id)
                    return _to_record(row)
            except SQLAlchemyError as exc:
                raise CatalogError.storage("lookup", repo_id) from exc

    async def put(self, record: CatalogRecord) -> None:
        """Insert a new record.

        Raises
        ------
        RecordExistsError
            If a record with the same identifier is already stored.
        CatalogError
            If the database cannot be written.

        """
        async with self._locked(record.id):
            try:
                async with self._session_factory() as session, session.begin():
                    session.add(
                        RepositoryRow(
                            id=record.id,
                            name=record.name,
                            description=record.description,
                            default_branch=record.default_branch,
                            updated_at=record.updated_at,
                        )
                    )
            except IntegrityError as exc:
                raise RecordExistsError(record.id) from exc
            except SQLAlchemyError as exc:
                raise CatalogError.storage("insert", record.id) from exc

    async def replace(self, record: CatalogRecord) -> None:
        """Overwrite the mutable fields of an existing record.

        Raises
        ------
        RecordNotFoundError
            If no record exists for ``record.id``.
        CatalogError
            If the database cannot be written.

        """
        async with self._locked(record.id):
            try:
                async with self._session_factory() as session, session.begin():
                    row = await session.get(RepositoryRow, record.id)
                    if row is None:
                        raise RecordNotFoundError(record.id)
                    row.name = record.name
                    row.description = record.description
                    row.default_branch = record.default_branch
                    row.updated_at = record.updated_at
            except SQLAlchemyError as exc:
                raise CatalogError.storage("update", record.id) from exc

    async def is_newer_than(self, repo_id: int, candidate: str) -> bool:
        """Return True when ``candidate`` is strictly later than the stored time.

        Equal timestamps are not newer. RFC 3339 values are compared as
        instants; anything unparsable falls back to string ordering.

        Raises
        ------
        RecordNotFoundError
            If the repository has never been stored.
        CatalogError
            If the database cannot be read.

        """
        record = await self.get(repo_id)
        return is_earlier(record.updated_at, candidate)
