"""Async GitHub API client wrapper using githubkit.

This module provides the rate-limit aware request executor: one
authenticated GET per logical call, retried after the server-supplied
``retry-after`` delay when GitHub answers with a rate-limit status.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from githubkit import GitHub
from githubkit.exception import RequestError, RequestFailed, RequestTimeout

from github_pr_count.config import ClientConfig, get_github_token, get_settings
from github_pr_count.logging import get_logger
from github_pr_count.schemas import ApiResult, RepositoryRef

from .exceptions import MissingCredentialError, RateLimitExceededError, UpstreamError
from .links import page_links

if TYPE_CHECKING:
    from .rate_limit.monitor import RateLimitMonitor

logger = get_logger(__name__)

GITHUB_ACCEPT = "application/vnd.github+json"
RATE_LIMIT_STATUSES = frozenset({403, 429})

QueryParams = Mapping[str, str | int]


def parse_retry_after(headers: Mapping[str, str]) -> int | None:
    """Read the retry-after header as whole seconds.

    Args:
        headers: Response headers with lower-case names

    Returns:
        Seconds to wait, or None if the header is missing or not a non-negative integer
    """
    value = headers.get("retry-after")
    if value is None:
        return None
    try:
        seconds = int(str(value).strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class GitHubClient:
    """Rate-limit aware executor for GitHub REST GET calls.

    Usage:
        async with GitHubClient() as client:
            result = await client.get_page(
                client.pulls_path(RepositoryRef(owner="octocat", repo="hello-world")),
                page=1,
                params={"state": "all"},
            )
            print(result.item_count, result.links.last)

    Retry policy: on a 403/429 response the call is reissued after
    ``max(retry_after, min_request_interval)`` seconds, up to
    ``retry_limit`` times. There is no computed backoff; GitHub states
    how long to wait.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        config: ClientConfig | None = None,
        min_request_interval: float | None = None,
        rate_monitor: RateLimitMonitor | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub PAT. If not provided, GITHUB_TOKEN is read from
                   the environment each time a call is issued.
            base_url: API base URL (defaults to settings.github_api_url)
            config: Executor configuration (defaults to settings.client)
            min_request_interval: Floor for rate-limit retry waits in seconds
                                  (defaults to settings.pacing.min_request_interval_seconds)
            rate_monitor: Optional RateLimitMonitor updated from every response
        """
        settings = get_settings()
        self._token = token
        self._base_url = base_url or settings.github_api_url
        self._config = config or settings.client
        self._min_request_interval = (
            settings.pacing.min_request_interval_seconds
            if min_request_interval is None
            else min_request_interval
        )
        self._rate_monitor = rate_monitor
        self._client: GitHub[Any] | None = None

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance.

        Authentication is sent explicitly per request, so the githubkit
        client itself is unauthenticated. Its own retry and HTTP cache are
        disabled: retries are decided here.
        """
        if self._client is None:
            self._client = GitHub(
                base_url=self._base_url,
                timeout=self._config.request_timeout_seconds,
                auto_retry=False,
                http_cache=False,
            )
        return self._client

    @property
    def retry_limit(self) -> int:
        """Maximum retries after a rate-limited response."""
        return self._config.retry_limit

    @property
    def results_per_page(self) -> int:
        """Page size used for full scans."""
        return self._config.results_per_page

    @property
    def rate_monitor(self) -> RateLimitMonitor | None:
        """Access the rate limit monitor (if configured)."""
        return self._rate_monitor

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client = None

    async def __aenter__(self) -> GitHubClient:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------
    @staticmethod
    def pulls_path(repo: RepositoryRef) -> str:
        """Path of the pull request listing for a repository."""
        return f"/repos/{repo.owner}/{repo.repo}/pulls"

    @staticmethod
    def search_path(kind: str) -> str:
        """Path of a search endpoint (e.g. 'issues')."""
        return f"/search/{kind}"

    # -------------------------------------------------------------------------
    # Request Execution
    # -------------------------------------------------------------------------
    async def get_page(
        self,
        path: str,
        page: int,
        params: QueryParams | None = None,
        *,
        per_page: int | None = None,
    ) -> ApiResult:
        """Get a single page of a paginated listing.

        Args:
            path: API path (e.g. from pulls_path())
            page: 1-based page number
            params: Shared query parameters (not modified)
            per_page: Page size (defaults to results_per_page)

        Returns:
            ApiResult for the page
        """
        page_params: dict[str, str | int] = dict(params or {})
        page_params["page"] = page
        page_params["per_page"] = per_page or self.results_per_page
        return await self.execute(path, page_params, page=page)

    async def execute(
        self,
        path: str,
        params: QueryParams | None = None,
        *,
        page: int | None = None,
    ) -> ApiResult:
        """Issue a GET, retrying while GitHub answers with a rate limit.

        Args:
            path: API path or absolute URL
            params: Query parameters
            page: Requested page number, recorded on the result

        Returns:
            ApiResult wrapping the successful response

        Raises:
            MissingCredentialError: If no token is configured (before any I/O)
            RateLimitExceededError: If still rate limited after retry_limit retries
            UpstreamError: On any other failure response or transport error
        """
        token = self._resolve_token()
        query = dict(params or {})
        retry_limit = self.retry_limit

        attempt = 0
        while True:
            attempt += 1
            logger.debug(
                "GET {} {} (attempt {}/{})",
                path,
                query,
                attempt,
                retry_limit + 1,
            )
            response = await self._send(path, query, token)
            status = response.status_code
            headers = self._header_dict(response)
            self._update_rate_limit(headers)

            if status not in RATE_LIMIT_STATUSES:
                if not 200 <= status < 300:
                    raise UpstreamError(
                        f"GitHub API error ({status}) for {path}",
                        status_code=status,
                    )
                return self._to_result(response, headers, page)

            retry_after = parse_retry_after(headers)
            if retry_after is None:
                raise UpstreamError(
                    f"GitHub rate limited {path} ({status}) without a valid retry-after header",
                    status_code=status,
                )

            logger.warning(
                "GitHub rate limited {} ({}), retry-after={}s (attempt {}/{})",
                path,
                status,
                retry_after,
                attempt,
                retry_limit + 1,
            )
            if attempt > retry_limit:
                raise RateLimitExceededError(
                    f"Exceeded {retry_limit} retries for GitHub rate limit on {path}",
                    attempts=attempt,
                    retry_after=retry_after,
                )

            delay = max(retry_after, self._min_request_interval)
            logger.info("Retrying {} after {:.1f}s", path, delay)
            await asyncio.sleep(delay)

    def _resolve_token(self) -> str:
        """Read the bearer token at call time."""
        token = self._token or get_github_token()
        if not token:
            raise MissingCredentialError(
                "GitHub token required. Set GITHUB_TOKEN environment variable."
            )
        return token

    async def _send(self, path: str, params: dict[str, str | int], token: str) -> Any:
        """Perform one GET and return the response, failed or not.

        Non-2xx responses come back from githubkit as RequestFailed; their
        response is returned so the caller can classify the status.
        """
        try:
            return await self._github.arequest(
                "GET",
                path,
                params=params or None,
                headers={
                    "Accept": GITHUB_ACCEPT,
                    "Authorization": f"Bearer {token}",
                },
            )
        except RequestFailed as e:
            return e.response
        except (RequestError, RequestTimeout) as e:
            raise UpstreamError(f"Call to GitHub failed for {path}: {e}") from e

    @staticmethod
    def _header_dict(response: Any) -> dict[str, str]:
        """Response headers as a plain dict with lower-case names."""
        headers = getattr(response, "headers", None) or {}
        return {str(k).lower(): str(v) for k, v in headers.items()}

    @staticmethod
    def _to_result(response: Any, headers: dict[str, str], page: int | None) -> ApiResult:
        """Wrap a successful response."""
        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamError(
                "GitHub API returned an invalid JSON body",
                status_code=response.status_code,
            ) from e

        return ApiResult(
            status_code=response.status_code,
            headers=headers,
            body=body,
            links=page_links(response.raw_response.links),
            page=page,
        )

    def _update_rate_limit(self, headers: dict[str, str]) -> None:
        """Feed response headers to the rate limit monitor."""
        if self._rate_monitor is None:
            return
        try:
            self._rate_monitor.update_from_headers(headers)
        except Exception as e:
            # Don't let rate limit tracking failures break API calls
            logger.debug("Failed to update rate limit from headers: {}", e)
