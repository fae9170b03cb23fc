"""Crypto prices from the CoinGecko public API (free, no API key)."""

import logging

import httpx
from pydantic import (
    BaseModel,
    Field,
)

from finchat.core.schema import (
    CryptoQuote,
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

PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"

# Ticker symbols and casual names -> CoinGecko ids
CRYPTO_ALIASES = {
    "btc": "bitcoin",
    "bitcoin": "bitcoin",
    "eth": "ethereum",
    "ether": "ethereum",
    "ethereum": "ethereum",
    "sol": "solana",
    "solana": "solana",
    "doge": "dogecoin",
    "dogecoin": "dogecoin",
    "xrp": "ripple",
    "ripple": "ripple",
    "ada": "cardano",
    "cardano": "cardano",
    "bnb": "binancecoin",
    "binance": "binancecoin",
    "matic": "matic-network",
    "polygon": "matic-network",
    "dot": "polkadot",
    "polkadot": "polkadot",
    "ltc": "litecoin",
    "litecoin": "litecoin",
    "usdt": "tether",
    "tether": "tether",
    "shib": "shiba-inu",
    "trx": "tron",
    "tron": "tron",
    "avax": "avalanche-2",
    "avalanche": "avalanche-2",
}


class CryptoPriceArgs(BaseModel):
    """Arguments of the ``get_crypto_price`` tool."""

    crypto_id: str = Field(
        ..., description="Cryptocurrency symbol or name, e.g. 'bitcoin', 'btc', 'ethereum'"
    )


def resolve_crypto_id(name: str) -> str:
    """Map a symbol or casual name to its CoinGecko id; unknown input is lower-cased."""
    key = name.strip().lower()
    return CRYPTO_ALIASES.get(key, key)


@register_tool(
    ToolName.CRYPTO_PRICE,
    "Get the current price of a cryptocurrency in INR and USD with its 24 hour change.",
    CryptoPriceArgs,
    "CoinGecko",
)
async def fetch_crypto_price(
    crypto_id: str, *, client: httpx.AsyncClient | None = None
) -> CryptoQuote | Unavailable:
    """Fetch INR/USD prices and the 24h change for *crypto_id*."""
    tool = ToolName.CRYPTO_PRICE.value
    coin = resolve_crypto_id(crypto_id)
    params = {"ids": coin, "vs_currencies": "inr,usd", "include_24hr_change": "true"}
    try:
        async with client_scope(client) as http:
            data = await get_json(http, PRICE_URL, params=params)
        entry = data.get(coin) if isinstance(data, dict) else None
        if not entry:
            logger.warning("CoinGecko has no price for '%s'", coin)
            return Unavailable(tool=tool, reason=UnavailableReason.NO_DATA, detail=coin)
        return CryptoQuote(
            crypto_id=coin,
            price_inr=entry.get("inr"),
            price_usd=entry.get("usd"),
            change_24h=entry.get("inr_24h_change", entry.get("usd_24h_change")),
        )
    except (httpx.HTTPError, ValueError, TypeError, AttributeError) as exc:
        # pydantic's ValidationError is a ValueError
        return unavailable_from(tool, exc)
