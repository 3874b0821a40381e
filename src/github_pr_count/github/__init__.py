"""GitHub API client module.

This module provides:
- GitHubClient: Rate-limit aware request executor
- Pagination links: page_links
- Rate limit monitoring: RateLimitMonitor, PoolRateLimit, RateLimitPool
- Concurrent page fetching: PageFetcher
- Counting: PullRequestCounter, CountStrategy, InMemoryCountCache
"""

from .client import GitHubClient
from .counting import (
    CountCache,
    CountStrategy,
    InMemoryCountCache,
    OutputFormat,
    PullRequestCounter,
    get_default_cache,
)
from .exceptions import (
    CountTimeoutError,
    CountUnavailableError,
    GitHubClientError,
    MissingCredentialError,
    RateLimitExceededError,
    UpstreamError,
)
from .links import page_links, parse_page_number
from .pacing import PageFetcher
from .rate_limit import PoolRateLimit, RateLimitMonitor, RateLimitPool

__all__ = [
    # Client
    "GitHubClient",
    # Exceptions
    "CountTimeoutError",
    "CountUnavailableError",
    "GitHubClientError",
    "MissingCredentialError",
    "RateLimitExceededError",
    "UpstreamError",
    # Links
    "page_links",
    "parse_page_number",
    # Rate limit monitoring
    "PoolRateLimit",
    "RateLimitMonitor",
    "RateLimitPool",
    # Page fetching
    "PageFetcher",
    # Counting
    "CountCache",
    "CountStrategy",
    "InMemoryCountCache",
    "OutputFormat",
    "PullRequestCounter",
    "get_default_cache",
]
