"""
Equity quotes from the Yahoo Finance v8 chart API (free, no API key).
Bare tickers are assumed to trade on NSE.
"""

import logging

import httpx
from pydantic import (
    BaseModel,
    Field,
)

from finchat.core.schema import (
    StockQuote,
    Unavailable,
    UnavailableReason,
)
from finchat.tools import (
    ToolName,
    register_tool,
)
from finchat.tools.http import (
    client_scope,
    get_json,
    unavailable_from,
)

logger = logging.getLogger(__name__)

CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"
DEFAULT_SUFFIX = ".NS"
DEFAULT_CURRENCY = "INR"


class StockPriceArgs(BaseModel):
    """Arguments of the ``get_stock_price`` tool."""

    symbol: str = Field(
        ...,
        description="Stock ticker, e.g. 'RELIANCE', 'TCS', 'INFY.NS' or 'SBIN.BO'. "
        "NSE is assumed when no exchange suffix is given.",
    )


def normalize_symbol(symbol: str) -> str:
    """Upper-case *symbol* and append the NSE suffix to bare tickers."""
    symbol = symbol.strip().upper()
    if "." in symbol or symbol.startswith("^"):
        return symbol
    return f"{symbol}{DEFAULT_SUFFIX}"


def parse_chart(symbol: str, data: dict) -> StockQuote | None:
    """Extract the latest quote from a chart API payload."""
    chart_result = (data.get("chart") or {}).get("result") or []
    if not chart_result:
        return None
    meta = chart_result[0].get("meta") or {}
    price = meta.get("regularMarketPrice")
    if price is None:
        return None
    prev_close = meta.get("chartPreviousClose") or meta.get("previousClose")

    change = change_pct = None
    if prev_close:
        change = round(price - prev_close, 2)
        change_pct = round((price - prev_close) / prev_close * 100, 2)

    return StockQuote(
        symbol=meta.get("symbol") or symbol,
        price=price,
        previous_close=prev_close,
        change=change,
        change_percent=change_pct,
        currency=meta.get("currency") or DEFAULT_CURRENCY,
        exchange=meta.get("exchangeName"),
    )


@register_tool(
    ToolName.STOCK_PRICE,
    "Get the live share price of an Indian (NSE/BSE) or international stock or index.",
    StockPriceArgs,
    "Yahoo Finance",
)
async def fetch_stock_price(
    symbol: str, *, client: httpx.AsyncClient | None = None
) -> StockQuote | Unavailable:
    """Fetch the one-day quote for *symbol*."""
    tool = ToolName.STOCK_PRICE.value
    ticker = normalize_symbol(symbol)
    try:
        async with client_scope(client) as http:
            data = await get_json(
                http, CHART_URL.format(symbol=ticker), params={"interval": "1d", "range": "1d"}
            )
        quote = parse_chart(ticker, data)
    except (httpx.HTTPError, ValueError, TypeError, AttributeError) as exc:
        return unavailable_from(tool, exc)

    if quote is None:
        logger.warning("No market data found for symbol '%s'", ticker)
        return Unavailable(tool=tool, reason=UnavailableReason.NO_DATA, detail=ticker)
    return quote
