"""Pydantic schemas for paginated GitHub API responses.

GitHub does not report page counts as first-class fields. They are
inferred from the Link header relations attached to each response.
"""

from typing import Any

from pydantic import Field

from .base import SchemaBase

LINK_RELATIONS = ("first", "prev", "next", "last")


class PageLinks(SchemaBase):
    """Page numbers referenced by a response's Link header.

    A relation is set only when GitHub emitted it. The final page of a
    listing carries no ``last`` relation.
    """

    first: int | None = Field(default=None, description="Page number of rel=first")
    prev: int | None = Field(default=None, description="Page number of rel=prev")
    next: int | None = Field(default=None, description="Page number of rel=next")
    last: int | None = Field(default=None, description="Page number of rel=last")

    @property
    def page_count(self) -> int:
        """Total number of pages implied by the relations.

        ``last`` when present; otherwise the response is itself the final
        page, so ``prev + 1``. A response without any relation is the only
        page.
        """
        if self.last is not None:
            return self.last
        if self.prev is not None:
            return self.prev + 1
        return 1


class ApiResult(SchemaBase):
    """One successful GitHub API response."""

    status_code: int = Field(description="HTTP status code")
    headers: dict[str, str] = Field(default_factory=dict, description="Response headers")
    body: Any = Field(default=None, description="Decoded JSON body")
    links: PageLinks = Field(default_factory=PageLinks, description="Parsed Link header")
    page: int | None = Field(default=None, description="Requested page number, if paginated")

    @property
    def item_count(self) -> int:
        """Number of records in a list body (0 for any other body)."""
        if isinstance(self.body, list):
            return len(self.body)
        return 0
