"""Mutual fund NAV lookup via mfapi.in, a free mirror of AMFI data."""

import logging

import httpx
from pydantic import (
    BaseModel,
    Field,
    field_validator,
)

from finchat.core.schema import (
    FundNav,
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

SCHEME_URL = "https://api.mfapi.in/mf/{scheme_code}"


class MutualFundNavArgs(BaseModel):
    """Arguments of the ``get_mutual_fund_nav`` tool."""

    scheme_code: str = Field(..., description="AMFI scheme code, e.g. '119551'")

    @field_validator("scheme_code", mode="before")
    @classmethod
    def _coerce_code(cls, value):
        # Models frequently send the code as a number
        return str(value).strip()


@register_tool(
    ToolName.MUTUAL_FUND_NAV,
    "Get the latest NAV (Net Asset Value) of an Indian mutual fund scheme by AMFI scheme code.",
    MutualFundNavArgs,
    "mfapi.in (AMFI)",
)
async def fetch_mutual_fund_nav(
    scheme_code: str, *, client: httpx.AsyncClient | None = None
) -> FundNav | Unavailable:
    """Fetch the most recent NAV data point of *scheme_code*."""
    tool = ToolName.MUTUAL_FUND_NAV.value
    try:
        async with client_scope(client) as http:
            data = await get_json(http, SCHEME_URL.format(scheme_code=scheme_code))
        series = data.get("data") or []
        if not series:
            logger.warning("mfapi returned no NAV series for scheme %s", scheme_code)
            return Unavailable(tool=tool, reason=UnavailableReason.NO_DATA, detail=scheme_code)
        latest = series[0]
        meta = data.get("meta") or {}
        return FundNav(
            scheme_code=str(meta.get("scheme_code") or scheme_code),
            scheme_name=meta.get("scheme_name") or "",
            fund_house=meta.get("fund_house") or "",
            category=meta.get("scheme_category") or "",
            nav=float(latest["nav"]),
            date=latest["date"],
        )
    except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as exc:
        return unavailable_from(tool, exc)
