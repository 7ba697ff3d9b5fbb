"""Persistent catalog of repositories mirrored by earlier runs.

Usage
-----
Open a catalog on a SQLite file::

    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

    from cgmirror.catalog import Catalog, init_catalog_storage

    engine = create_async_engine("sqlite+aiosqlite:///repos.db")
    await init_catalog_storage(engine)
    catalog = Catalog(async_sessionmaker(engine, expire_on_commit=False))

Check whether a repository changed since it was last mirrored::

    if await catalog.is_newer_than(repo.id, repo.effective_updated_at):
        ...

"""

from cgmirror.catalog.errors import (
    CatalogError,
    RecordBusyError,
    RecordExistsError,
    RecordNotFoundError,
)
from cgmirror.catalog.models import CatalogRecord
from cgmirror.catalog.service import Catalog
from cgmirror.catalog.storage import RepositoryRow, init_catalog_storage

__all__ = [
    "Catalog",
    "CatalogError",
    "CatalogRecord",
    "RecordBusyError",
    "RecordExistsError",
    "RecordNotFoundError",
    "RepositoryRow",
    "init_catalog_storage",
]
