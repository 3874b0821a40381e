"""Pull request counting.

This module provides:
- PullRequestCounter: metadata, concurrent-scan and search strategies
- CountCache / InMemoryCountCache: per-repository pagination state
- CountStrategy, OutputFormat: strategy and output selection enums
"""

from .cache import CountCache, InMemoryCountCache, get_default_cache
from .counter import PullRequestCounter
from .strategies import CountStrategy, OutputFormat

__all__ = [
    # Counter
    "PullRequestCounter",
    # Cache
    "CountCache",
    "InMemoryCountCache",
    "get_default_cache",
    # Enums
    "CountStrategy",
    "OutputFormat",
]
