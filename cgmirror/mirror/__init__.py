"""Local bare mirrors: git operations and cgit metadata."""

from __future__ import annotations

from .errors import GitCommandError, MirrorError, MirrorStep, ProjectionError
from .git import INITIAL_BRANCH, GitCommandRunner, GitRunner
from .operator import CGITRC_FILE, MirrorOperator, mirror_path
from .projection import AGE_FILE, MetadataProjector

__all__ = [
    "AGE_FILE",
    "CGITRC_FILE",
    "INITIAL_BRANCH",
    "GitCommandError",
    "GitCommandRunner",
    "GitRunner",
    "MetadataProjector",
    "MirrorError",
    "MirrorOperator",
    "MirrorStep",
    "ProjectionError",
    "mirror_path",
]
