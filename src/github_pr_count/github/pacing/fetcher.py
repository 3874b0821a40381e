"""Concurrent page fetching with staggered starts and a concurrency cap.

All pages of a range are scheduled up front. Page ``i`` waits
``(i - start_page) * min_request_interval`` seconds before its call is
issued, so initiation is staggered while the calls themselves overlap.
A semaphore per range caps how many of its calls are in flight at once.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from github_pr_count.config import PacingConfig, get_settings
from github_pr_count.logging import get_logger

if TYPE_CHECKING:
    from github_pr_count.github.client import GitHubClient, QueryParams
    from github_pr_count.schemas import ApiResult

logger = get_logger(__name__)


class PageFetcher:
    """Fetches a range of pages concurrently through a GitHubClient.

    Usage:
        fetcher = PageFetcher(client)
        results = await fetcher.fetch_range(path, 2, 10, {"state": "all"})

    The range runs inside an asyncio.TaskGroup: when any page fails, the
    pages still pending or in flight are cancelled and the first error
    is raised as-is.
    """

    def __init__(
        self,
        client: GitHubClient,
        config: PacingConfig | None = None,
    ) -> None:
        """Initialize the page fetcher.

        Args:
            client: Executor used for every page call
            config: Pacing configuration (uses settings if not provided)
        """
        self._client = client
        self._config = config or get_settings().pacing

    @property
    def config(self) -> PacingConfig:
        """Get the pacing configuration."""
        return self._config

    def start_delay(self, page: int, start_page: int) -> float:
        """Seconds page ``page`` waits before its call is issued."""
        return (page - start_page) * self._config.min_request_interval_seconds

    async def fetch_range(
        self,
        path: str,
        start_page: int,
        end_page: int,
        params: QueryParams | None = None,
        *,
        per_page: int | None = None,
    ) -> list[ApiResult]:
        """Fetch every page in ``[start_page, end_page]``.

        Args:
            path: API path of the paginated listing
            start_page: First page to fetch (inclusive)
            end_page: Last page to fetch (inclusive)
            params: Query parameters shared by all pages (not modified)
            per_page: Page size (defaults to the client's results_per_page)

        Returns:
            One ApiResult per page, in page order

        Raises:
            GitHubClientError: The first failure among the page calls
        """
        if end_page < start_page:
            return []

        logger.debug(
            "Fetching pages {}-{} of {} (max_concurrent={}, interval={}s)",
            start_page,
            end_page,
            path,
            self._config.max_concurrent_requests,
            self._config.min_request_interval_seconds,
        )

        semaphore = asyncio.Semaphore(self._config.max_concurrent_requests)
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(
                        self._fetch_page(
                            path,
                            page,
                            params,
                            semaphore,
                            per_page=per_page,
                            delay=self.start_delay(page, start_page),
                        )
                    )
                    for page in range(start_page, end_page + 1)
                ]
        except ExceptionGroup as group_error:
            first = group_error.exceptions[0]
            logger.debug(
                "Page range {}-{} of {} failed ({} error(s)), first: {!r}",
                start_page,
                end_page,
                path,
                len(group_error.exceptions),
                first,
            )
            raise first from None

        return [task.result() for task in tasks]

    async def _fetch_page(
        self,
        path: str,
        page: int,
        params: QueryParams | None,
        semaphore: asyncio.Semaphore,
        *,
        per_page: int | None,
        delay: float,
    ) -> ApiResult:
        """Wait out the page's start delay, then fetch it under the range's semaphore."""
        if delay > 0:
            await asyncio.sleep(delay)
        async with semaphore:
            return await self._client.get_page(path, page, params, per_page=per_page)
