"""Thin wrapper around the ``git`` executable.

Commands run through :func:`subprocess.run` in a worker thread so a slow
fetch for one repository never stalls the event loop serving the others.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import subprocess
import typing as typ

from .errors import GitCommandError

if typ.TYPE_CHECKING:
    from pathlib import Path

# Branch HEAD points at after ``git init``; pinned so it does not depend on
# the host's init.defaultBranch setting.
INITIAL_BRANCH = "master"
REMOTE_NAME = "origin"


class GitRunner(typ.Protocol):
    """Git operations needed to maintain a bare mirror."""

    async def init_bare(self, path: Path) -> None:
        """Create an empty bare repository at ``path``."""
        ...

    async def add_mirror_remote(self, path: Path, url: str) -> None:
        """Configure ``origin`` to mirror every ref from ``url``."""
        ...

    async def fetch(self, path: Path) -> None:
        """Fetch every ref from ``origin``."""
        ...

    async def fetch_all_prune(self, path: Path) -> None:
        """Fetch all remotes, pruning deleted refs and following tags."""
        ...

    async def set_head(self, path: Path, branch: str) -> None:
        """Point ``HEAD`` at ``refs/heads/<branch>``."""
        ...

    async def is_repository(self, path: Path) -> bool:
        """Return True when ``path`` is a git repository."""
        ...


class GitCommandRunner:
    """:class:`GitRunner` backed by the ``git`` command-line tool."""

    def __init__(self, executable: str | None = None) -> None:
        """Use ``executable`` or the first ``git`` on ``PATH``."""
        self._executable = executable

    def _git(self) -> str:
        if self._executable is None:
            self._executable = shutil.which("git")
        if self._executable is None:
            raise GitCommandError.missing_executable()
        return self._executable

    def _run(self, *args: str) -> str:
        argv = [self._git(), *args]
        result = subprocess.run(  # noqa: S603  # argv built from fixed subcommands
            argv,
            check=False,
            capture_output=True,
            text=True,
            env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
        )
        if result.returncode != 0:
            raise GitCommandError(argv, result.returncode, result.stderr)
        return result.stdout

    async def _run_async(self, *args: str) -> str:
        return await asyncio.to_thread(self._run, *args)

    async def init_bare(self, path: Path) -> None:
        """Create an empty bare repository at ``path``."""
        await self._run_async(
            "init", "--bare", "--quiet", f"--initial-branch={INITIAL_BRANCH}", str(path)
        )

    async def add_mirror_remote(self, path: Path, url: str) -> None:
        """Configure ``origin`` with ``+refs/*:refs/*`` and ``mirror = true``."""
        await self._run_async(
            "-C", str(path), "remote", "add", "--mirror=fetch", REMOTE_NAME, url
        )

    async def fetch(self, path: Path) -> None:
        """Fetch every ref from ``origin``."""
        await self._run_async("-C", str(path), "fetch", "--quiet", REMOTE_NAME)

    async def fetch_all_prune(self, path: Path) -> None:
        """Fetch all remotes, pruning deleted refs and following tags."""
        await self._run_async(
            "-C", str(path), "fetch", "--all", "--prune", "--tags", "--quiet"
        )

    async def set_head(self, path: Path, branch: str) -> None:
        """Point ``HEAD`` at ``refs/heads/<branch>``."""
        await self._run_async(
            "-C", str(path), "symbolic-ref", "HEAD", f"refs/heads/{branch}"
        )

    async def is_repository(self, path: Path) -> bool:
        """Return True when ``path`` is a git repository."""
        if not path.is_dir():
            return False
        try:
            await self._run_async("-C", str(path), "rev-parse", "--git-dir")
        except GitCommandError:
            return False
        return True
