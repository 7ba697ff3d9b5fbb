"""Errors raised by repository synchronisation."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class SyncError(Exception):
    """Base class for synchronisation errors."""


class RepositorySyncError(SyncError):
    """Raised when one repository cannot be synchronised.

    Wraps the underlying catalog, mirror, or projection error with the
    repository name so operators can tell failures apart in a run report.
    """

    def __init__(self, name: str, cause: BaseException) -> None:
        """Initialise with the repository name and underlying error."""
        self.name = name
        self.cause = cause
        super().__init__(f"{name}: {cause}")


class SyncRunError(SyncError):
    """Raised when one or more repositories in a run failed.

    Attributes
    ----------
    errors
        Every per-repository error, not just the first.

    """

    errors: tuple[RepositorySyncError, ...]

    def __init__(self, errors: cabc.Iterable[RepositorySyncError]) -> None:
        """Initialise with the errors collected during the run."""
        self.errors = tuple(errors)
        super().__init__("\n".join(str(error) for error in self.errors))
