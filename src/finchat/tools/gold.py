"""
Gold rate lookup.

There is no free, key-less price API for Indian retail gold, so this tool searches the web,
prefers snippets from trusted finance publishers and turns them into an advisory text.
"""

import logging
from typing import List
from urllib.parse import urlparse

import httpx
from pydantic import (
    BaseModel,
    Field,
)

from finchat.core.schema import (
    GoldAdvisory,
    SearchHit,
    Unavailable,
)
from finchat.tools import (
    ToolName,
    register_tool,
)
from finchat.tools.http import client_scope
from finchat.tools.web_search import search

logger = logging.getLogger(__name__)

TRUSTED_SOURCES = (
    "goodreturns",
    "economictimes",
    "moneycontrol",
    "bankbazaar",
    "livemint",
    "business-standard",
    "financialexpress",
    "ndtv",
    "businesstoday",
    "ibjarates",
)

FALLBACK_QUERY = "gold price India today"
TOP_SNIPPETS = 3

DISCLAIMER = (
    "Note: gold rates vary from city to city and jeweller to jeweller. Retail prices "
    "usually add 3% GST and making charges (often 8-25%) on top of the quoted rate. "
    "Check with your local jeweller or IBJA (ibjarates.com) before buying."
)


class GoldRateArgs(BaseModel):
    """Arguments of the ``get_gold_rate`` tool."""

    city: str = Field("India", description="Indian city for the rate, e.g. 'Mumbai'")


def _is_trusted(hit: SearchHit) -> bool:
    domain = urlparse(hit.link).netloc.lower()
    title = hit.title.lower()
    return any(src in domain or src in title for src in TRUSTED_SOURCES)


def pick_snippets(hits: List[SearchHit], limit: int = TOP_SNIPPETS) -> List[SearchHit]:
    """Prefer trusted publishers; fall back to the first unfiltered hits."""
    trusted = [hit for hit in hits if _is_trusted(hit)]
    return (trusted or hits)[:limit]


def build_advisory(city: str, hits: List[SearchHit]) -> GoldAdvisory:
    """Combine the chosen snippets with the static disclaimer."""
    chosen = pick_snippets(hits)
    lines = [f"Gold rate information for {city} (from recent web sources):", ""]
    for hit in chosen:
        source = urlparse(hit.link).netloc or hit.title
        lines.append(f"- {hit.snippet or hit.title} ({source})")
    lines.extend(["", DISCLAIMER])
    return GoldAdvisory(city=city, text="\n".join(lines), sources=[hit.link for hit in chosen])


@register_tool(
    ToolName.GOLD_RATE,
    "Get today's gold rate (22 carat and 24 carat) in India or a specific Indian city.",
    GoldRateArgs,
    "DuckDuckGo (trusted finance publishers)",
)
async def fetch_gold_rate(
    city: str = "India", *, client: httpx.AsyncClient | None = None
) -> GoldAdvisory | Unavailable:
    """Search for the current gold rate, retrying once with a broader query."""
    city = city.strip() or "India"
    query = f"gold rate today {city} 22 carat 24 carat"

    async with client_scope(client) as http:
        result = await search(query, client=http)
        if isinstance(result, Unavailable):
            logger.info("Gold search for '%s' found nothing, trying broader query", city)
            result = await search(FALLBACK_QUERY, client=http)

    if isinstance(result, Unavailable):
        return Unavailable(tool=ToolName.GOLD_RATE.value, reason=result.reason, detail=result.detail)
    return build_advisory(city, result)
