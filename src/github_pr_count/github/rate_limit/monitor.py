"""Passive rate limit tracking for GitHub API calls.

The monitor never delays or rejects a call. It records the quota GitHub
reports on each response so the CLI and logs can show how much budget a
count consumed.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from github_pr_count.logging import get_logger

from .schemas import PoolRateLimit, RateLimitPool

logger = get_logger(__name__)


class RateLimitMonitor:
    """Tracks the latest reported quota per rate limit pool.

    Usage:
        monitor = RateLimitMonitor()
        async with GitHubClient(rate_monitor=monitor) as client:
            await client.execute("/repos/octocat/hello-world/pulls")

        core = monitor.get_pool_limit(RateLimitPool.CORE)
    """

    def __init__(self, low_quota_threshold_pct: float = 10.0) -> None:
        """Initialize the rate limit monitor.

        Args:
            low_quota_threshold_pct: Log a warning when a pool drops below this % remaining
        """
        self._low_quota_threshold_pct = low_quota_threshold_pct
        self._pools: dict[RateLimitPool, PoolRateLimit] = {}
        self._updated_at: datetime | None = None

    def update_from_headers(self, headers: dict[str, str]) -> PoolRateLimit | None:
        """Update tracked quota from response headers.

        Args:
            headers: HTTP response headers with lower-case names

        Returns:
            The updated pool limit, or None if the headers carried none
        """
        pool_limit = PoolRateLimit.from_response_headers(headers)
        if pool_limit is None:
            return None

        previous = self._pools.get(pool_limit.pool)
        self._pools[pool_limit.pool] = pool_limit
        self._updated_at = datetime.now(UTC)

        crossed = previous is None or previous.remaining_percent >= self._low_quota_threshold_pct
        if crossed and pool_limit.remaining_percent < self._low_quota_threshold_pct:
            logger.warning(
                "GitHub {} quota low: {}/{} remaining (resets in {}s)",
                pool_limit.pool.value,
                pool_limit.remaining,
                pool_limit.limit,
                pool_limit.seconds_until_reset,
            )
        return pool_limit

    def get_pool_limit(self, pool: RateLimitPool = RateLimitPool.CORE) -> PoolRateLimit | None:
        """Get the last reported quota for a pool (None if never seen)."""
        return self._pools.get(pool)

    def to_dict(self) -> dict[str, Any]:
        """Export current state as dictionary (for logging/JSON output)."""
        return {
            "updated_at": self._updated_at.isoformat() if self._updated_at else None,
            "pools": {
                pool.value: {
                    "limit": limit.limit,
                    "remaining": limit.remaining,
                    "used": limit.used,
                    "remaining_percent": round(limit.remaining_percent, 2),
                    "reset_at": limit.reset_at.isoformat(),
                    "seconds_until_reset": limit.seconds_until_reset,
                }
                for pool, limit in self._pools.items()
            },
        }
