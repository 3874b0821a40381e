"""Rate limit tracking for the GitHub API.

Quota is tracked passively from response headers at zero API cost.
"""

from .monitor import RateLimitMonitor
from .schemas import PoolRateLimit, RateLimitPool

__all__ = [
    "PoolRateLimit",
    "RateLimitMonitor",
    "RateLimitPool",
]
