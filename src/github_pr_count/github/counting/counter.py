"""Pull request counting strategies.

Three independent ways to count a repository's pull requests:

- metadata: one call with page size 1; the ``last`` relation's page
  number is the count.
- concurrent: fetch every page (page size 100) concurrently and sum the
  items, shortcut by the count cache when nothing changed upstream.
- search: one search API call reporting ``total_count``.

No strategy falls back to another; each strategy's errors surface to
the caller unchanged.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from github_pr_count.config import get_settings
from github_pr_count.github.exceptions import (
    CountTimeoutError,
    CountUnavailableError,
    UpstreamError,
)
from github_pr_count.github.pacing import PageFetcher
from github_pr_count.logging import bind_repo
from github_pr_count.schemas import ApiResult, CountResult, RepositoryRef

from .cache import CountCache, get_default_cache
from .strategies import CountStrategy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from github_pr_count.github.client import GitHubClient
    from github_pr_count.schemas import CacheRecord

PULL_REQUEST_STATE = "all"


class PullRequestCounter:
    """Counts pull requests of a repository with a selectable strategy.

    Usage:
        async with GitHubClient() as client:
            counter = PullRequestCounter(client)
            result = await counter.count(
                RepositoryRef(owner="octocat", repo="hello-world"),
                CountStrategy.CONCURRENT,
                timeout=60,
            )
            print(result.count)
    """

    def __init__(
        self,
        client: GitHubClient,
        *,
        fetcher: PageFetcher | None = None,
        cache: CountCache | None = None,
        use_cache: bool | None = None,
        per_page: int | None = None,
    ) -> None:
        """Initialize the counter.

        Args:
            client: Rate-limited request executor
            fetcher: Page range fetcher (defaults to a PageFetcher over client)
            cache: Count cache for concurrent scans (defaults to the process-wide cache)
            use_cache: Whether concurrent scans consult the cache (defaults to settings)
            per_page: Page size for concurrent scans (defaults to the client's)
        """
        self._client = client
        self._fetcher = fetcher or PageFetcher(client)
        self._cache = cache if cache is not None else get_default_cache()
        self._use_cache = get_settings().cache.enabled if use_cache is None else use_cache
        self._per_page = per_page or client.results_per_page

    @property
    def cache(self) -> CountCache:
        """The count cache consulted by concurrent scans."""
        return self._cache

    @property
    def use_cache(self) -> bool:
        """Whether concurrent scans consult the cache."""
        return self._use_cache

    async def count(
        self,
        repo: RepositoryRef,
        strategy: CountStrategy = CountStrategy.CONCURRENT,
        *,
        timeout: float | None = None,
    ) -> CountResult:
        """Count pull requests with the given strategy.

        Args:
            repo: Target repository
            strategy: Counting strategy
            timeout: Seconds before the count is abandoned and in-flight
                     calls are cancelled (None = no limit)

        Returns:
            CountResult

        Raises:
            CountTimeoutError: If the timeout elapsed
            GitHubClientError: Whatever the chosen strategy raised
        """
        handlers: dict[CountStrategy, Callable[[RepositoryRef], Awaitable[CountResult]]] = {
            CountStrategy.METADATA: self.count_from_metadata,
            CountStrategy.CONCURRENT: self.count_concurrent,
            CountStrategy.SEARCH: self.count_from_search,
        }
        log = bind_repo(repo.owner, repo.repo)
        log.info("Counting pull requests (strategy={})", strategy.value)

        scope = asyncio.timeout(timeout)
        try:
            async with scope:
                result = await handlers[strategy](repo)
        except TimeoutError as e:
            if not scope.expired():
                raise
            raise CountTimeoutError(
                f"Counting pull requests for {repo.full_name} timed out after {timeout}s",
                timeout=timeout,
            ) from e

        log.info("Counted {} pull requests (strategy={})", result.count, strategy.value)
        return result

    # -------------------------------------------------------------------------
    # Metadata Strategy
    # -------------------------------------------------------------------------
    async def count_from_metadata(self, repo: RepositoryRef) -> CountResult:
        """Count from pagination metadata with one call.

        With one item per page the page count equals the item count, so
        the ``last`` relation's page number is the answer. Without a
        ``last`` relation the only page holds zero or one pull request.

        Raises:
            CountUnavailableError: If the page has a ``next`` but no ``last`` relation
        """
        result = await self._client.execute(
            self._client.pulls_path(repo),
            {"state": PULL_REQUEST_STATE, "per_page": 1, "page": 1},
            page=1,
        )
        links = result.links
        if links.last is not None:
            return CountResult(count=links.last)
        if links.next is None:
            return CountResult(count=result.item_count)
        raise CountUnavailableError(
            f"GitHub returned no last page for {repo.full_name}; count cannot be derived"
        )

    # -------------------------------------------------------------------------
    # Concurrent Scan Strategy
    # -------------------------------------------------------------------------
    async def count_concurrent(self, repo: RepositoryRef) -> CountResult:
        """Count by fetching every page concurrently.

        With a cache record the scan restarts at the previously last page,
        carrying the count of the pages before it. If the page count and
        the last page's size are unchanged, the cached total is returned
        after that single call. If pages disappeared upstream the scan
        restarts from page 1.
        """
        log = bind_repo(repo.owner, repo.repo)
        path = self._client.pulls_path(repo)
        params = {"state": PULL_REQUEST_STATE}

        record = self._cache.get(repo) if self._use_cache else None
        if record is not None and record.last_page <= 0:
            record = None

        start_page = 1
        carried = 0
        if record is not None:
            start_page = record.last_page
            # The previous last page is recounted: it may have grown
            carried = record.record_count - record.num_records_in_page

        first = await self._client.get_page(path, start_page, params, per_page=self._per_page)

        if record is not None:
            total_pages = first.links.page_count
            if self._is_unchanged(record, first, total_pages):
                log.info("Cache hit: {} pull requests unchanged", record.record_count)
                return CountResult(count=record.record_count)

            if record.last_page > total_pages or (start_page > 1 and first.item_count == 0):
                log.info(
                    "Cache stale: {} page(s) cached, {} observed; rescanning from page 1",
                    record.last_page,
                    total_pages,
                )
                start_page = 1
                carried = 0
                first = await self._client.get_page(
                    path, start_page, params, per_page=self._per_page
                )

        results = [first]
        last_page = first.links.last
        if last_page is not None and last_page > start_page:
            results.extend(
                await self._fetcher.fetch_range(
                    path,
                    start_page + 1,
                    last_page,
                    params,
                    per_page=self._per_page,
                )
            )

        count = carried + sum(result.item_count for result in results)
        log.debug(
            "Scanned {} page(s) from page {} (carried {}): {} pull requests",
            len(results),
            start_page,
            carried,
            count,
        )

        if self._use_cache:
            self._update_cache(repo, results, first.links.page_count, count)

        return CountResult(count=count)

    @staticmethod
    def _is_unchanged(record: CacheRecord, first: ApiResult, total_pages: int) -> bool:
        """Whether the fetched page matches what the cache last saw."""
        return total_pages == record.last_page and first.item_count == record.num_records_in_page

    def _update_cache(
        self,
        repo: RepositoryRef,
        results: list[ApiResult],
        total_pages: int,
        count: int,
    ) -> None:
        """Record the scan's page count, final page size and total."""
        final_page = next((result for result in results if result.links.last is None), None)
        if final_page is None:
            bind_repo(repo.owner, repo.repo).warning(
                "No final page among {} fetched page(s); cache not updated", len(results)
            )
            return
        self._cache.upsert(
            repo,
            last_page=total_pages,
            num_records_in_page=final_page.item_count,
            record_count=count,
        )

    # -------------------------------------------------------------------------
    # Search Strategy
    # -------------------------------------------------------------------------
    async def count_from_search(self, repo: RepositoryRef) -> CountResult:
        """Count with one search API call.

        The search index runs off cached data and may lag, and the search
        quota is stricter than the core one. Results are never cached.

        Raises:
            UpstreamError: If the response has no valid total_count
        """
        result = await self._client.execute(
            self._client.search_path("issues"),
            {"q": f"repo:{repo.full_name} is:pr", "per_page": 1},
        )
        body = result.body
        total = body.get("total_count") if isinstance(body, dict) else None
        if not isinstance(total, int) or isinstance(total, bool) or total < 0:
            raise UpstreamError(
                f"GitHub search returned no total_count for {repo.full_name}",
                status_code=result.status_code,
            )
        return CountResult(count=total)
