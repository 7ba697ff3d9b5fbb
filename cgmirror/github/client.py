"""GitHub REST client that lists an account's repositories."""

from __future__ import annotations

import dataclasses
import os
import typing as typ

import httpx
import msgspec

from cgmirror.logging import get_logger, log_debug

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import RemoteRepository, decode_repository_page

logger = get_logger(__name__)

_HTTP_ERROR_STATUS_THRESHOLD = 400
_MAX_PER_PAGE = 100


class RepositoryLister(typ.Protocol):
    """Interface for listing the repositories to mirror."""

    async def fetch_all(self, account: str) -> list[RemoteRepository]:
        """Return every repository owned by ``account``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubClientConfig:
    """Configuration for the GitHub REST API client."""

    api_url: str = "https://api.github.com"
    token: str | None = None
    timeout_s: float = 20.0
    user_agent: str = "cgmirror/0.1"
    per_page: int = _MAX_PER_PAGE

    @classmethod
    def from_env(cls) -> GitHubClientConfig:
        """Build configuration from ``CGMIRROR_GITHUB_*`` environment variables.

        ``CGMIRROR_GITHUB_TOKEN`` is optional; unauthenticated requests work
        for public repositories at a lower rate limit.
        """
        token = os.environ.get("CGMIRROR_GITHUB_TOKEN", "").strip() or None
        api_url = os.environ.get("CGMIRROR_GITHUB_API_URL", "").strip()
        if api_url:
            return cls(api_url=api_url.rstrip("/"), token=token)
        return cls(token=token)


class GitHubRepositoryClient:
    """List repositories through ``GET /users/{account}/repos``.

    Pages are requested in order, most recently updated first, until GitHub
    returns an empty page.
    """

    def __init__(
        self,
        config: GitHubClientConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client, creating an HTTP client if none is given."""
        self._config = config or GitHubClientConfig()
        if not 1 <= self._config.per_page <= _MAX_PER_PAGE:
            raise GitHubConfigError.invalid_page_size(self._config.per_page)

        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self._config.user_agent,
        }
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"

        # Headers go on each request so injected clients send them too.
        self._headers = headers
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self._config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> GitHubRepositoryClient:
        """Return the client for use in ``async with`` blocks."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close owned resources on exit."""
        await self.aclose()

    async def fetch_all(self, account: str) -> list[RemoteRepository]:
        """Return every repository owned by ``account``.

        Raises
        ------
        GitHubConfigError
            If ``account`` is blank.
        GitHubAPIError
            If a request fails or GitHub answers with an error status.
        GitHubResponseShapeError
            If a page cannot be decoded into repositories.

        """
        if not account.strip():
            raise GitHubConfigError.empty_account()

        repos: list[RemoteRepository] = []
        page = 1
        while True:
            batch = await self._fetch_page(account, page)
            if not batch:
                break
            repos.extend(batch)
            page += 1

        log_debug(logger, "Listed %d repositories for %s", len(repos), account)
        return repos

    async def _fetch_page(self, account: str, page: int) -> list[RemoteRepository]:
        url = f"{self._config.api_url}/users/{account}/repos"
        params = {
            "page": str(page),
            "per_page": str(self._config.per_page),
            "sort": "updated",
        }
        try:
            response = await self._client.get(url, params=params, headers=self._headers)
        except httpx.HTTPError as exc:
            raise GitHubAPIError.transport(url, str(exc)) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(response.status_code, url)

        try:
            return decode_repository_page(response.content)
        except msgspec.DecodeError as exc:
            raise GitHubResponseShapeError.invalid_page(page, str(exc)) from exc
