from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote as url_quote

import httpx

from portfolio_quotes.integrations.base import DEFAULT_TIMEOUT_SEC, QuoteProviderClient
from portfolio_quotes.schemas.quote import FailureKind, ProviderResult

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)


def _first_result(payload: Any) -> Dict[str, Any]:
    chart = payload.get("chart") if isinstance(payload, dict) else None
    results = (chart or {}).get("result")
    if isinstance(results, list) and results and isinstance(results[0], dict):
        return results[0]
    return {}


class YahooChartClient(QuoteProviderClient):
    """Secondary, unauthenticated equities source (v8 chart endpoint)."""

    provider = "yahoo-chart"
    not_found_kind = FailureKind.NO_DATA

    def __init__(
        self,
        base_url: str = "https://query1.finance.yahoo.com",
        timeout: float = DEFAULT_TIMEOUT_SEC,
        session: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, session=session)

    async def fetch_quote(self, symbol: str) -> ProviderResult:
        payload, failure = await self._get_json(
            symbol,
            f"{self.base_url}/v8/finance/chart/{url_quote(symbol, safe='')}",
            params={"interval": "1d", "range": "1d"},
            headers={"User-Agent": USER_AGENT},
        )
        if failure is not None:
            return failure

        meta = _first_result(payload).get("meta")
        if not isinstance(meta, dict):
            return self._failure(FailureKind.NO_DATA, symbol, "missing chart result")

        price = self._to_float(meta.get("regularMarketPrice"))
        if price <= 0:
            return self._failure(FailureKind.NO_DATA, symbol, "missing regularMarketPrice")

        previous_close = self._to_float(meta.get("chartPreviousClose"))
        if previous_close <= 0:
            previous_close = self._to_float(meta.get("previousClose"))

        change, change_percent = self.compute_change(price, previous_close)
        return self._quote(symbol, price=price, change=change, change_percent=change_percent)

    @staticmethod
    def compute_change(price: float, previous_close: Optional[float]) -> tuple[float, float]:
        # previous close of 0/None means "unknown", not a 100% move
        if not previous_close or previous_close <= 0:
            return 0.0, 0.0
        change = price - previous_close
        return change, change / previous_close * 100.0
