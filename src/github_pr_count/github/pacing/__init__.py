"""Request pacing for GitHub API page ranges.

Components:
- PageFetcher: staggered, concurrency-capped, cancellable page range fetches
"""

from .fetcher import PageFetcher

__all__ = [
    "PageFetcher",
]
