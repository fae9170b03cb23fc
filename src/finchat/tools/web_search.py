"""
DuckDuckGo web search by scraping the HTML results page.
Free, no API key required.
"""

import logging
from typing import List
from urllib.parse import (
    parse_qs,
    urlparse,
)

import httpx
from bs4 import BeautifulSoup
from pydantic import (
    BaseModel,
    Field,
)

from finchat.core.schema import (
    SearchHit,
    Unavailable,
    UnavailableReason,
)
from finchat.tools import (
    ToolName,
    register_tool,
)
from finchat.tools.http import (
    client_scope,
    unavailable_from,
)

logger = logging.getLogger(__name__)

SEARCH_URL = "https://html.duckduckgo.com/html/"
MAX_RESULTS = 5


class SearchWebArgs(BaseModel):
    """Arguments of the ``search_web`` tool."""

    query: str = Field(..., description="Search query, e.g. 'latest repo rate RBI'")


def _unwrap_link(href: str) -> str:
    """DuckDuckGo wraps result links in a redirect; return the target URL."""
    if not href:
        return ""
    parsed = urlparse(href if not href.startswith("//") else f"https:{href}")
    if parsed.path.startswith("/l/"):
        target = parse_qs(parsed.query).get("uddg")
        if target:
            return target[0]
    return href if not href.startswith("//") else f"https:{href}"


def parse_results(html: str, max_results: int = MAX_RESULTS) -> List[SearchHit]:
    """Parse up to *max_results* organic results out of a DuckDuckGo HTML page."""
    soup = BeautifulSoup(html, "html.parser")
    hits: List[SearchHit] = []
    for node in soup.select("div.result"):
        if "result--ad" in (node.get("class") or []):
            continue
        title_node = node.select_one("a.result__a")
        if title_node is None:
            continue
        title = title_node.get_text(" ", strip=True)
        if not title:
            continue
        snippet_node = node.select_one(".result__snippet")
        hits.append(
            SearchHit(
                title=title,
                snippet=snippet_node.get_text(" ", strip=True) if snippet_node else "",
                link=_unwrap_link(str(title_node.get("href") or "")),
            )
        )
        if len(hits) >= max_results:
            break
    return hits


async def search(
    query: str, *, client: httpx.AsyncClient | None = None, max_results: int = MAX_RESULTS
) -> List[SearchHit] | Unavailable:
    """Run one search and return the parsed hits, or ``Unavailable``."""
    tool = ToolName.SEARCH_WEB.value
    try:
        async with client_scope(client) as http:
            resp = await http.get(SEARCH_URL, params={"q": query, "kl": "in-en"})
            resp.raise_for_status()
            hits = parse_results(resp.text, max_results=max_results)
    except httpx.HTTPError as exc:
        return unavailable_from(tool, exc)

    if not hits:
        logger.warning("Search for '%s' returned no parseable results", query)
        return Unavailable(tool=tool, reason=UnavailableReason.NO_DATA, detail=query)
    logger.debug("Search for '%s' returned %d results", query, len(hits))
    return hits


@register_tool(
    ToolName.SEARCH_WEB,
    "Search the web for current information: news, interest rates, tax rules, scheme "
    "updates, IPOs or anything that may have changed recently.",
    SearchWebArgs,
    "DuckDuckGo",
)
async def search_web(
    query: str, *, client: httpx.AsyncClient | None = None
) -> List[SearchHit] | Unavailable:
    """Web search tool entry point."""
    return await search(query, client=client)
