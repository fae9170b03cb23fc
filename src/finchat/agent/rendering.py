"""
Turn fetch outcomes into the text blocks the model reads as tool output.

Every :class:`~finchat.tools.ToolName` has exactly one renderer.  A renderer receives either the
fetcher's success value or :class:`Unavailable` and must always return text; failures become
remediation pointing at authoritative websites instead of raw error codes.
"""

from typing import (
    Any,
    Callable,
    Dict,
    List,
)

from finchat.core.schema import (
    CryptoQuote,
    FundNav,
    GoldAdvisory,
    SearchHit,
    StockQuote,
    Unavailable,
)
from finchat.tools import ToolName

CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£"}

REMEDIATION: Dict[ToolName, str] = {
    ToolName.SEARCH_WEB: (
        "Web search is unavailable right now. Answer from your own knowledge and suggest the "
        "user verify time-sensitive details on official sites such as rbi.org.in, "
        "incometax.gov.in or sebi.gov.in."
    ),
    ToolName.GOLD_RATE: (
        "Live gold rates could not be fetched. Suggest the user check goodreturns.in, "
        "ibjarates.com (India Bullion and Jewellers Association) or their local jeweller "
        "for today's 22K and 24K rates."
    ),
    ToolName.STOCK_PRICE: (
        "The stock price could not be fetched. Suggest the user check nseindia.com, "
        "bseindia.com or moneycontrol.com for the live quote, and confirm the ticker symbol "
        "is correct."
    ),
    ToolName.CRYPTO_PRICE: (
        "The crypto price could not be fetched. Suggest the user check coingecko.com, "
        "coinmarketcap.com or an Indian exchange such as WazirX for the live price."
    ),
    ToolName.MUTUAL_FUND_NAV: (
        "The NAV could not be fetched. Suggest the user check amfiindia.com or "
        "valueresearchonline.com, and confirm the AMFI scheme code is correct."
    ),
}


def direction(change: float | None) -> str:
    """Glyph plus sign for a price change."""
    if change is None:
        return "➖"
    return "📈 +" if change >= 0 else "📉 -"


def format_change(change: float | None, percent: float | None = None) -> str:
    """Render an absolute/percentage change with its direction glyph."""
    if change is None and percent is None:
        return "change unavailable"
    sign_source = change if change is not None else percent
    parts = []
    if change is not None:
        parts.append(f"{abs(change):,.2f}")
    if percent is not None:
        parts.append(f"({abs(percent):.2f}%)" if change is not None else f"{abs(percent):.2f}%")
    return f"{direction(sign_source)}{' '.join(parts)}"


def _money(value: float | None, currency: str) -> str:
    if value is None:
        return "n/a"
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    return f"{symbol}{value:,.2f}" if symbol else f"{value:,.2f} {currency}"


def render_unavailable(name: ToolName, outcome: Unavailable) -> str:
    """Remediation text for a failed fetch."""
    return f"[{name.value} unavailable: {outcome.reason.value}] {REMEDIATION[name]}"


def render_search(hits: List[SearchHit]) -> str:
    lines = ["Web search results:"]
    for idx, hit in enumerate(hits, start=1):
        lines.append(f"{idx}. {hit.title}")
        if hit.snippet:
            lines.append(f"   {hit.snippet}")
        if hit.link:
            lines.append(f"   Source: {hit.link}")
    return "\n".join(lines)


def render_gold(advisory: GoldAdvisory) -> str:
    return advisory.text


def render_stock(quote: StockQuote) -> str:
    lines = [
        f"Stock: {quote.symbol}" + (f" ({quote.exchange})" if quote.exchange else ""),
        f"Price: {_money(quote.price, quote.currency)}",
    ]
    if quote.previous_close is not None:
        lines.append(f"Previous close: {_money(quote.previous_close, quote.currency)}")
    lines.append(f"Change: {format_change(quote.change, quote.change_percent)}")
    return "\n".join(lines)


def render_crypto(quote: CryptoQuote) -> str:
    lines = [
        f"Crypto: {quote.crypto_id}",
        f"Price: {_money(quote.price_inr, 'INR')} / {_money(quote.price_usd, 'USD')}",
        f"24h change: {format_change(None, quote.change_24h)}",
    ]
    return "\n".join(lines)


def render_fund(fund: FundNav) -> str:
    lines = [f"Scheme: {fund.scheme_name or fund.scheme_code} (code {fund.scheme_code})"]
    if fund.fund_house:
        lines.append(f"Fund house: {fund.fund_house}")
    if fund.category:
        lines.append(f"Category: {fund.category}")
    lines.append(f"NAV: ₹{fund.nav:,.4f} as of {fund.date}")
    return "\n".join(lines)


RENDERERS: Dict[ToolName, Callable[[Any], str]] = {
    ToolName.SEARCH_WEB: render_search,
    ToolName.GOLD_RATE: render_gold,
    ToolName.STOCK_PRICE: render_stock,
    ToolName.CRYPTO_PRICE: render_crypto,
    ToolName.MUTUAL_FUND_NAV: render_fund,
}

if set(RENDERERS) != set(ToolName) or set(REMEDIATION) != set(ToolName):
    raise RuntimeError("Every tool needs a renderer and a remediation text")


def render(name: ToolName, outcome: Any) -> str:
    """Render a fetch outcome for the model."""
    if isinstance(outcome, Unavailable):
        return render_unavailable(name, outcome)
    return RENDERERS[name](outcome)
