"""Persistence model for the repository catalog.

A single table keyed by the GitHub repository id. Timestamps are stored as
the strings GitHub reported so that unparsable values survive a round trip.
"""

from __future__ import annotations

import typing as typ

from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


class Base(DeclarativeBase):
    """Base declarative class for catalog persistence."""

    metadata: typ.Any


class RepositoryRow(Base):
    """A previously mirrored repository."""

    __tablename__ = "repositories"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"),
        primary_key=True,
        autoincrement=False,
    )
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text(), default=None)
    default_branch: Mapped[str | None] = mapped_column(String(255), default=None)
    updated_at: Mapped[str] = mapped_column(String(64))


async def init_catalog_storage(engine: AsyncEngine) -> None:
    """Create the catalog table if it does not already exist.

    Examples
    --------
    >>> from sqlalchemy.ext.asyncio import create_async_engine
    >>> engine = create_async_engine("sqlite+aiosqlite:///catalog.db")
    >>> await init_catalog_storage(engine)

    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
