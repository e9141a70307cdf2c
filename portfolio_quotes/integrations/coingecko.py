from __future__ import annotations

from typing import Optional

import httpx

from portfolio_quotes.integrations.base import DEFAULT_TIMEOUT_SEC, QuoteProviderClient
from portfolio_quotes.schemas.quote import FailureKind, ProviderResult

COIN_IDS = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "USDT": "tether",
    "BNB": "binancecoin",
    "ADA": "cardano",
    "SOL": "solana",
    "DOT": "polkadot",
    "DOGE": "dogecoin",
    "AVAX": "avalanche-2",
    "MATIC": "matic-network",
}


def coin_id_for(symbol: str) -> str:
    """Map a ticker to a CoinGecko id; unmapped tickers are used lowercased."""
    value = symbol.strip()
    return COIN_IDS.get(value.upper(), value.lower())


class CoinGeckoClient(QuoteProviderClient):
    provider = "coingecko"

    def __init__(
        self,
        base_url: str = "https://api.coingecko.com/api/v3",
        timeout: float = DEFAULT_TIMEOUT_SEC,
        session: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, session=session)

    async def fetch_quote(self, symbol: str) -> ProviderResult:
        coin_id = coin_id_for(symbol)
        payload, failure = await self._get_json(
            symbol,
            f"{self.base_url}/simple/price",
            params={"ids": coin_id, "vs_currencies": "usd", "include_24hr_change": "true"},
        )
        if failure is not None:
            return failure

        row = payload.get(coin_id) if isinstance(payload, dict) else None
        if not isinstance(row, dict):
            return self._failure(FailureKind.NO_DATA, symbol, f"coin_id={coin_id} not in response")

        price = self._to_float(row.get("usd"))
        if price <= 0:
            return self._failure(FailureKind.NO_DATA, symbol, f"coin_id={coin_id} has no usd price")

        # simple/price has no absolute change, only the 24h percentage
        return self._quote(
            symbol,
            price=price,
            change=0.0,
            change_percent=self._to_float(row.get("usd_24h_change")),
        )
