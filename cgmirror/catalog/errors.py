"""Errors raised by the repository catalog."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog errors."""

    @classmethod
    def storage(cls, operation: str, repo_id: int) -> CatalogError:
        """Return an error for a failed storage call."""
        return cls(f"catalog {operation} failed for repository {repo_id}")


class RecordNotFoundError(CatalogError):
    """Raised when no record exists for a repository identifier."""

    def __init__(self, repo_id: int) -> None:
        """Initialise with the missing identifier."""
        self.repo_id = repo_id
        super().__init__(f"No catalog record for repository {repo_id}")


class RecordExistsError(CatalogError):
    """Raised when inserting a record whose identifier is already stored."""

    def __init__(self, repo_id: int) -> None:
        """Initialise with the duplicate identifier."""
        self.repo_id = repo_id
        super().__init__(f"Catalog record already exists for repository {repo_id}")


class RecordBusyError(CatalogError):
    """Raised when another worker in this process holds the identifier."""

    def __init__(self, repo_id: int) -> None:
        """Initialise with the contended identifier."""
        self.repo_id = repo_id
        super().__init__(f"Repository {repo_id} is already being synchronised")
