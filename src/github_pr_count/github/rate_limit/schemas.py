"""Pydantic schemas for GitHub API rate limit data.

These schemas represent the x-ratelimit-* headers GitHub attaches to
every REST response, including error responses.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field, computed_field


class RateLimitPool(StrEnum):
    """GitHub rate limit resource pools used by the counter.

    Each pool has its own separate quota. Pull request listing uses
    'core'; the search endpoint has a stricter 'search' quota.
    See: https://docs.github.com/en/rest/rate-limit/rate-limit
    """

    CORE = "core"
    SEARCH = "search"


class PoolRateLimit(BaseModel):
    """Quota state of a single resource pool."""

    pool: RateLimitPool = Field(description="Resource pool name")
    limit: int = Field(ge=0, description="Maximum requests allowed per window")
    remaining: int = Field(ge=0, description="Requests remaining in current window")
    used: int = Field(ge=0, description="Requests used in current window")
    reset_at: datetime = Field(description="UTC datetime when limit resets")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining_percent(self) -> float:
        """Percentage of rate limit remaining (0.0 to 100.0)."""
        if self.limit == 0:
            return 0.0
        return (self.remaining / self.limit) * 100

    @property
    def seconds_until_reset(self) -> int:
        """Seconds until rate limit resets (0 if already past)."""
        delta = self.reset_at - datetime.now(UTC)
        return max(0, int(delta.total_seconds()))

    @classmethod
    def from_response_headers(
        cls,
        headers: dict[str, str],
        default_pool: RateLimitPool = RateLimitPool.CORE,
    ) -> Self | None:
        """Parse from HTTP response headers.

        GitHub includes rate limit info in headers on every response:
        - x-ratelimit-limit
        - x-ratelimit-remaining
        - x-ratelimit-used
        - x-ratelimit-reset
        - x-ratelimit-resource (pool name)

        Args:
            headers: HTTP response headers with lower-case names
            default_pool: Pool to use if the resource header is missing or unknown

        Returns:
            PoolRateLimit, or None if the response carried no usable rate limit headers
        """
        if "x-ratelimit-remaining" not in headers or "x-ratelimit-limit" not in headers:
            return None

        try:
            pool = RateLimitPool(headers.get("x-ratelimit-resource", default_pool.value))
        except ValueError:
            pool = default_pool

        try:
            limit = int(headers["x-ratelimit-limit"])
            remaining = int(headers["x-ratelimit-remaining"])
            used = int(headers.get("x-ratelimit-used", str(max(0, limit - remaining))))
            reset_ts = int(headers.get("x-ratelimit-reset", "0"))
        except ValueError:
            return None

        reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts > 0 else datetime.now(UTC)
        return cls(pool=pool, limit=limit, remaining=remaining, used=used, reset_at=reset_at)
