"""Pydantic schemas for GitHub PR Count."""

from .base import SchemaBase
from .count import CacheRecord, CountResult
from .pagination import LINK_RELATIONS, ApiResult, PageLinks
from .repository import NAME_MAX_LENGTH, RepositoryRef, parse_repo_string

__all__ = [
    # Pagination
    "LINK_RELATIONS",
    "ApiResult",
    "PageLinks",
    # Count
    "CacheRecord",
    "CountResult",
    # Repository
    "NAME_MAX_LENGTH",
    "RepositoryRef",
    "parse_repo_string",
    # Base
    "SchemaBase",
]
