"""Pagination links for GitHub listings.

GitHub paginates with a Link header:

    <https://api.github.com/repositories/1/pulls?page=2>; rel="next",
    <https://api.github.com/repositories/1/pulls?page=5>; rel="last"

httpx already splits the header into ``Response.links``
(``{rel: {"url": ..., "rel": ...}}``). Only the page number of each
relation is kept.
"""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import parse_qs, urlparse

from github_pr_count.schemas.pagination import LINK_RELATIONS, PageLinks

Links = Mapping[str, Mapping[str, str]]


def parse_page_number(url: str) -> int | None:
    """Extract the ``page`` query parameter from a URL.

    Args:
        url: Absolute or relative URL

    Returns:
        Page number, or None if absent or not a positive integer
    """
    values = parse_qs(urlparse(url).query).get("page")
    if not values:
        return None
    try:
        page = int(values[0])
    except ValueError:
        return None
    return page if page > 0 else None


def page_links(links: Links | None) -> PageLinks:
    """Reduce parsed Link header entries to page numbers per relation.

    Entries without a URL, a rel parameter, a known relation name or a
    numeric page are dropped.

    Args:
        links: ``Response.links`` of the httpx response (None or empty
               when the response had no Link header)

    Returns:
        PageLinks with the recognised relations set
    """
    if not links:
        return PageLinks()

    pages: dict[str, int] = {}
    for link in links.values():
        url = link.get("url", "").strip()
        rel_value = link.get("rel")
        if not url or not rel_value:
            continue

        page = parse_page_number(url)
        if page is None:
            continue

        for rel in rel_value.lower().split():
            if rel in LINK_RELATIONS:
                pages[rel] = page

    return PageLinks(**pages)
