"""Errors raised while listing an account's repositories."""

from __future__ import annotations


class FetchError(RuntimeError):
    """Base class for failures that prevent a repository listing."""


class GitHubAPIError(FetchError):
    """Raised when GitHub returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, url: str) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"GitHub REST HTTP {status_code} for {url}", status_code=status_code)

    @classmethod
    def transport(cls, url: str, reason: str) -> GitHubAPIError:
        """Return an error for a request that never produced a response."""
        return cls(f"GitHub request to {url} failed: {reason}")


class GitHubResponseShapeError(FetchError):
    """Raised when a repository listing page cannot be decoded."""

    @classmethod
    def invalid_page(cls, page: int, reason: str) -> GitHubResponseShapeError:
        """Return an error for a page that does not match the expected shape."""
        return cls(f"GitHub repository page {page} is malformed: {reason}")


class GitHubConfigError(FetchError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def empty_account(cls) -> GitHubConfigError:
        """Return an error when no account name was supplied."""
        return cls("GitHub account name must be non-empty")

    @classmethod
    def invalid_page_size(cls, per_page: int) -> GitHubConfigError:
        """Return an error for a page size GitHub would reject."""
        return cls(f"per_page must be between 1 and 100, got {per_page}")
