"""Enums for pull request counting."""

from enum import Enum


class CountStrategy(str, Enum):
    """Strategy for counting a repository's pull requests.

    The strategies trade upstream call volume against freshness.
    """

    METADATA = "metadata"
    """One call with page size 1; the count is the last page number."""

    CONCURRENT = "concurrent"
    """Full scan of every page, fetched concurrently, shortcut by the count cache."""

    SEARCH = "search"
    """One search API call reporting total_count. Index may lag; stricter quota."""


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""
