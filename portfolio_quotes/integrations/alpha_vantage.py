from __future__ import annotations

import logging
from typing import Optional

import httpx

from portfolio_quotes.integrations.base import DEFAULT_TIMEOUT_SEC, QuoteProviderClient
from portfolio_quotes.schemas.quote import FailureKind, ProviderResult

logger = logging.getLogger(__name__)

_FREQUENCY_LIMIT_PHRASE = "api call frequency"
_RATE_LIMIT_PHRASE = "rate limit"


class AlphaVantageClient(QuoteProviderClient):
    """Primary equities quote source (GLOBAL_QUOTE endpoint, API key auth)."""

    provider = "alpha-vantage"
    not_found_kind = FailureKind.NO_DATA

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://www.alphavantage.co",
        timeout: float = DEFAULT_TIMEOUT_SEC,
        session: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, session=session)
        self.api_key = api_key

    async def fetch_quote(self, symbol: str) -> ProviderResult:
        if not self.api_key:
            return self._failure(FailureKind.TRANSPORT_ERROR, symbol, "API_KEY_MISSING")

        payload, failure = await self._get_json(
            symbol,
            f"{self.base_url}/query",
            params={"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self.api_key},
        )
        if failure is not None:
            return failure
        if not isinstance(payload, dict):
            return self._failure(FailureKind.NO_DATA, symbol, "unexpected payload")

        global_quote = payload.get("Global Quote") or {}
        if global_quote.get("05. price"):
            price = self._to_float(global_quote.get("05. price"))
            if price <= 0:
                return self._failure(FailureKind.NO_DATA, symbol, "non-positive price")
            return self._quote(
                symbol,
                price=price,
                change=self._to_float(global_quote.get("09. change")),
                change_percent=self._to_float(global_quote.get("10. change percent")),
            )

        return self._classify_notice(symbol, payload)

    def _classify_notice(self, symbol: str, payload: dict) -> ProviderResult:
        error_message = payload.get("Error Message")
        if error_message:
            logger.error("[PROVIDER][error_message] provider=%s symbol=%s message=%s", self.provider, symbol, error_message)
            return self._failure(FailureKind.TRANSPORT_ERROR, symbol, str(error_message))

        note = payload.get("Note")
        if note:
            if _FREQUENCY_LIMIT_PHRASE in str(note).lower():
                return self._failure(FailureKind.RATE_LIMITED, symbol, str(note))
            return self._failure(FailureKind.NO_DATA, symbol, str(note))

        information = payload.get("Information")
        if information:
            if _RATE_LIMIT_PHRASE in str(information).lower():
                return self._failure(FailureKind.RATE_LIMITED, symbol, str(information))
            return self._failure(FailureKind.NO_DATA, symbol, str(information))

        return self._failure(FailureKind.NO_DATA, symbol, f"keys={sorted(payload.keys())}")
