"""Test fixtures for GitHub PR Count."""

from .github_responses import (
    FakePullRequestApi,
    make_failed,
    make_link_header,
    make_rate_limited,
    make_response,
)
from .rate_limit_responses import make_rate_limit_headers

__all__ = [
    # GitHub API responses
    "FakePullRequestApi",
    "make_failed",
    "make_link_header",
    "make_rate_limited",
    "make_response",
    # Rate limit headers
    "make_rate_limit_headers",
]
