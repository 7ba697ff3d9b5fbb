"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cgmirror.catalog import Catalog, init_catalog_storage
from cgmirror.mirror import MetadataProjector, MirrorOperator
from cgmirror.sync import Synchronizer, SynchronizerConfig
from tests.helpers.fakes import FakeGitRunner

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest_asyncio.fixture
async def session_factory(
    tmp_path: Path,
) -> typ.AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Yield a fresh async session factory backed by sqlite."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    try:
        await init_catalog_storage(engine)
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest.fixture
def catalog(session_factory: async_sessionmaker[AsyncSession]) -> Catalog:
    """Return a catalog bound to the test database."""
    return Catalog(session_factory)


@pytest.fixture
def mirror_root(tmp_path: Path) -> Path:
    """Return an empty directory to hold mirrors."""
    root = tmp_path / "mirrors"
    root.mkdir()
    return root


@pytest.fixture
def fake_git() -> FakeGitRunner:
    """Return a git runner that simulates repositories on disk."""
    return FakeGitRunner()


@pytest.fixture
def synchronizer(
    catalog: Catalog, fake_git: FakeGitRunner, mirror_root: Path
) -> Synchronizer:
    """Return a synchroniser wired to the fake git runner."""
    return Synchronizer(
        catalog,
        MirrorOperator(fake_git),
        MetadataProjector(),
        SynchronizerConfig(mirror_root=mirror_root),
    )
