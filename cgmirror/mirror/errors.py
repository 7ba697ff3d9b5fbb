"""Errors raised while creating or refreshing local mirrors."""

from __future__ import annotations

import enum
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


class GitCommandError(RuntimeError):
    """Raised when a ``git`` invocation exits unsuccessfully."""

    def __init__(self, argv: typ.Sequence[str], returncode: int, stderr: str) -> None:
        """Record the failing command line and its diagnostics."""
        self.argv = tuple(argv)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"git {' '.join(self.argv[1:])} exited {returncode}{detail}")

    @classmethod
    def missing_executable(cls) -> GitCommandError:
        """Return an error when no ``git`` is available on ``PATH``."""
        return cls(("git",), 127, "git executable not found on PATH")


class MirrorStep(enum.StrEnum):
    """The git-level step of a mirror operation that failed."""

    CREATE = "create"
    REMOTE_ADD = "remote_add"
    FETCH = "fetch"
    CHANGE_BRANCH = "change_branch"
    SIDECAR = "sidecar"
    OPEN = "open"
    UPDATE_FETCH = "update_fetch"


class MirrorError(RuntimeError):
    """Raised when a mirror cannot be created or refreshed.

    The mirror directory may be left partially populated.
    """

    def __init__(self, step: MirrorStep, path: Path, reason: str) -> None:
        """Initialise with the failing step, mirror path, and reason."""
        self.step = step
        self.path = path
        self.reason = reason
        super().__init__(f"{step} failed for '{path}': {reason}")


class ProjectionError(RuntimeError):
    """Raised when description or timestamp metadata cannot be written."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initialise with the file that could not be updated."""
        self.path = path
        self.reason = reason
        super().__init__(f"unable to update '{path}': {reason}")
