"""GitHub repository listing client and models."""

from __future__ import annotations

from .client import GitHubClientConfig, GitHubRepositoryClient, RepositoryLister
from .errors import (
    FetchError,
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)
from .models import RemoteRepository, decode_repository_page

__all__ = [
    "FetchError",
    "GitHubAPIError",
    "GitHubClientConfig",
    "GitHubConfigError",
    "GitHubRepositoryClient",
    "GitHubResponseShapeError",
    "RemoteRepository",
    "RepositoryLister",
    "decode_repository_page",
]
