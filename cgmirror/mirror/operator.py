"""Create and refresh bare mirrors of remote repositories."""

from __future__ import annotations

import shutil
import typing as typ

from cgmirror.logging import get_logger, log_debug

from .errors import GitCommandError, MirrorError, MirrorStep
from .git import INITIAL_BRANCH

if typ.TYPE_CHECKING:
    from pathlib import Path

    from cgmirror.github.models import RemoteRepository

    from .git import GitRunner

logger = get_logger(__name__)

CGITRC_FILE = "cgitrc"
FORK_DIRECTORY = "fork"


def mirror_path(root: Path, repo: RemoteRepository) -> Path:
    """Return where ``repo`` is mirrored under ``root``.

    Forks live under ``<root>/fork/`` so a fork never collides with a
    repository of the same name.
    """
    base = root / FORK_DIRECTORY if repo.fork else root
    return base / f"{repo.name}.git"


def _set_cgitrc_value(path: Path, key: str, value: str) -> None:
    """Set ``key=value`` in a cgitrc file, replacing any existing entry."""
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        lines = []

    entry = f"{key}={value}"
    updated = False
    for index, line in enumerate(lines):
        if line.split("=", 1)[0].strip() == key:
            lines[index] = entry
            updated = True
    if not updated:
        lines.append(entry)

    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


class MirrorOperator:
    """Perform the git-level half of synchronising one repository.

    Parameters
    ----------
    git:
        Collaborator that runs git operations.
    cgitrc_template:
        Optional file copied verbatim into every newly created mirror as its
        ``cgitrc``.

    """

    def __init__(self, git: GitRunner, *, cgitrc_template: Path | None = None) -> None:
        """Configure the operator with a git runner and optional template."""
        self._git = git
        self._cgitrc_template = cgitrc_template

    async def create(self, repo: RemoteRepository, root: Path) -> Path:
        """Mirror ``repo`` for the first time and return the mirror path.

        Works like ``git clone --mirror`` with the description written and,
        for repositories whose default branch is not ``master``, ``HEAD``
        pointed at the default branch.

        Raises
        ------
        MirrorError
            Naming the step that failed. The directory is not cleaned up.

        """
        path = mirror_path(root, repo)
        log_debug(logger, "Creating mirror of %s at %s", repo.clone_url, path)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await self._git.init_bare(path)
            description = repo.description_text.strip()
            (path / "description").write_text(
                f"{description}\n" if description else "", encoding="utf-8"
            )
        except (GitCommandError, OSError) as exc:
            raise MirrorError(MirrorStep.CREATE, path, str(exc)) from exc

        await self._step(
            MirrorStep.REMOTE_ADD,
            path,
            self._git.add_mirror_remote(path, repo.clone_url),
        )
        await self._step(MirrorStep.FETCH, path, self._git.fetch(path))

        if repo.default_branch != INITIAL_BRANCH:
            await self._step(
                MirrorStep.CHANGE_BRANCH,
                path,
                self._git.set_head(path, repo.default_branch),
            )

        if self._cgitrc_template is not None:
            try:
                shutil.copyfile(self._cgitrc_template, path / CGITRC_FILE)
            except OSError as exc:
                msg = f"unable to copy '{self._cgitrc_template}': {exc}"
                raise MirrorError(MirrorStep.SIDECAR, path, msg) from exc

        return path

    async def refresh(self, path: Path) -> None:
        """Fetch all refs into an existing mirror, pruning deleted ones.

        Raises
        ------
        MirrorError
            With step ``open`` when ``path`` is not a repository, or
            ``update_fetch`` when the fetch fails.

        """
        if not await self._git.is_repository(path):
            raise MirrorError(MirrorStep.OPEN, path, "not a git repository")
        await self._step(MirrorStep.UPDATE_FETCH, path, self._git.fetch_all_prune(path))

    async def change_default_branch(self, path: Path, branch: str) -> None:
        """Switch ``HEAD`` to ``branch`` and record it in the cgitrc sidecar.

        ``HEAD`` is updated first. If the sidecar write then fails, the mirror
        is left with the new ``HEAD`` and the old ``defbranch``.

        Raises
        ------
        MirrorError
            With step ``change_branch`` or ``sidecar``.

        """
        await self._step(
            MirrorStep.CHANGE_BRANCH, path, self._git.set_head(path, branch)
        )
        try:
            _set_cgitrc_value(path / CGITRC_FILE, "defbranch", branch)
        except OSError as exc:
            raise MirrorError(MirrorStep.SIDECAR, path, str(exc)) from exc

    async def _step(
        self, step: MirrorStep, path: Path, operation: typ.Awaitable[None]
    ) -> None:
        try:
            await operation
        except GitCommandError as exc:
            raise MirrorError(step, path, str(exc)) from exc
