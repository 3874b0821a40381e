"""Count result and cache record models."""

from dataclasses import dataclass

from pydantic import Field

from .base import SchemaBase


class CountResult(SchemaBase):
    """Pull request count for one repository."""

    count: int = Field(ge=0, description="Number of pull requests")


@dataclass
class CacheRecord:
    """Last observed pagination state of a repository's pull requests.

    A value of -1 means "not yet known".
    """

    owner: str
    repo: str

    last_page: int = -1
    """Number of pages observed at the last full scan."""

    num_records_in_page: int = -1
    """Item count of the final page at the last full scan."""

    record_count: int = -1
    """Total pull requests counted at the last full scan."""
