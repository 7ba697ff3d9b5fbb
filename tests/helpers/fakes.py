"""Fakes and builders for synchronisation tests."""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

from cgmirror.github.models import RemoteRepository
from cgmirror.mirror.errors import GitCommandError
from cgmirror.mirror.git import INITIAL_BRANCH

if typ.TYPE_CHECKING:
    from pathlib import Path

_DEFAULT_UPDATED_AT = "2021-01-01T00:00:00Z"


def make_repo(  # noqa: PLR0913
    repo_id: int = 1,
    name: str = "reef",
    *,
    description: str | None = "Coral tooling",
    fork: bool = False,
    default_branch: str = "main",
    size: int = 10,
    updated_at: str = _DEFAULT_UPDATED_AT,
    pushed_at: str | None = None,
) -> RemoteRepository:
    """Build a remote repository descriptor with sensible defaults."""
    return RemoteRepository(
        id=repo_id,
        name=name,
        description=description,
        fork=fork,
        clone_url=f"https://github.com/octo/{name}.git",
        default_branch=default_branch,
        size=size,
        updated_at=updated_at,
        pushed_at=pushed_at,
    )


@dataclasses.dataclass(slots=True)
class FakeGitRunner:
    """Simulate just enough of a bare repository on disk.

    ``fetch`` writes loose ref files for every branch listed in
    ``remote_branches`` (``main`` when empty). Set ``fail_on`` to a
    ``(method, path-name)`` pair to make that call raise, and ``delay`` to
    make fetches yield to the event loop.
    """

    remote_branches: tuple[str, ...] = ("main",)
    fail_on: set[tuple[str, str]] = dataclasses.field(default_factory=set)
    delay: float = 0.0
    calls: list[tuple[str, str]] = dataclasses.field(default_factory=list)

    def _record(self, method: str, path: Path) -> None:
        self.calls.append((method, path.name))
        if (method, path.name) in self.fail_on:
            raise GitCommandError(("git", method), 128, f"simulated {method} failure")

    async def init_bare(self, path: Path) -> None:
        self._record("init_bare", path)
        (path / "refs" / "heads").mkdir(parents=True, exist_ok=True)
        (path / "HEAD").write_text(f"ref: refs/heads/{INITIAL_BRANCH}\n")

    async def add_mirror_remote(self, path: Path, url: str) -> None:
        self._record("add_mirror_remote", path)
        (path / "config").write_text(
            f'[remote "origin"]\n\turl = {url}\n\tfetch = +refs/*:refs/*\n'
            "\tmirror = true\n"
        )

    async def fetch(self, path: Path) -> None:
        self._record("fetch", path)
        await self._write_refs(path)

    async def fetch_all_prune(self, path: Path) -> None:
        self._record("fetch_all_prune", path)
        await self._write_refs(path)

    async def set_head(self, path: Path, branch: str) -> None:
        self._record("set_head", path)
        (path / "HEAD").write_text(f"ref: refs/heads/{branch}\n")

    async def is_repository(self, path: Path) -> bool:
        self.calls.append(("is_repository", path.name))
        return (path / "HEAD").is_file()

    async def _write_refs(self, path: Path) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        for branch in self.remote_branches:
            ref = path / "refs" / "heads" / branch
            ref.parent.mkdir(parents=True, exist_ok=True)
            ref.write_text("0" * 40 + "\n")

    def methods_for(self, name: str) -> list[str]:
        """Return the methods invoked against the mirror directory ``name``."""
        return [method for method, target in self.calls if target == name]
