from __future__ import annotations

import logging

from portfolio_quotes.schemas.asset import AssetType
from portfolio_quotes.schemas.quote import FailureKind, ProviderFailure, ProviderResult, Quote
from portfolio_quotes.services.quote_cache import QuoteCache

logger = logging.getLogger(__name__)

_EQUITY_TYPES = {AssetType.STOCK.value, AssetType.ETF.value}
_NO_REALTIME_TYPES = {
    AssetType.BOND.value,
    AssetType.REAL_ESTATE.value,
    AssetType.COMMODITY.value,
    AssetType.OTHER.value,
}
_FALLBACK_KINDS = {FailureKind.RATE_LIMITED, FailureKind.TRANSPORT_ERROR}


def _type_value(asset_type) -> str:
    if isinstance(asset_type, AssetType):
        return asset_type.value
    return str(asset_type or "").strip().lower()


class QuoteResolver:
    """Asset-type dispatch with primary -> secondary equities fallback."""

    def __init__(
        self,
        *,
        equity_primary,
        equity_secondary,
        crypto_client,
        quote_cache: QuoteCache | None = None,
    ) -> None:
        self.equity_primary = equity_primary
        self.equity_secondary = equity_secondary
        self.crypto_client = crypto_client
        self.quote_cache = quote_cache

        self.lookups = 0
        self.cache_hits = 0
        self.secondary_fallbacks = 0
        self.unavailable = 0
        self.unsupported = 0
        self.primary_failures: dict[str, int] = {kind.value: 0 for kind in FailureKind}

    async def _call(self, client, symbol: str) -> ProviderResult:
        try:
            return await client.fetch_quote(symbol)
        except Exception as exc:
            provider = getattr(client, "provider", type(client).__name__)
            logger.exception("[QUOTE][adapter_exception] provider=%s symbol=%s", provider, symbol)
            return ProviderFailure(
                kind=FailureKind.TRANSPORT_ERROR,
                provider=str(provider),
                symbol=symbol,
                detail=f"{type(exc).__name__}: {exc}",
            )

    async def _resolve_equity(self, symbol: str) -> Quote | None:
        result = await self._call(self.equity_primary, symbol)
        if isinstance(result, Quote):
            return result

        self.primary_failures[result.kind.value] += 1
        if result.kind not in _FALLBACK_KINDS:
            return None

        self.secondary_fallbacks += 1
        logger.info(
            "[QUOTE][secondary_fallback] symbol=%s primary=%s reason=%s",
            symbol,
            result.provider,
            result.kind.value,
        )
        fallback = await self._call(self.equity_secondary, symbol)
        if isinstance(fallback, Quote):
            return fallback
        return None

    async def _resolve_crypto(self, symbol: str) -> Quote | None:
        result = await self._call(self.crypto_client, symbol)
        if isinstance(result, Quote):
            return result
        return None

    async def get_current_quote(self, asset_type, symbol: str) -> Quote | None:
        type_value = _type_value(asset_type)
        raw_symbol = str(symbol or "").strip()

        if type_value in _EQUITY_TYPES:
            family, normalized, resolve = "equity", raw_symbol.upper(), self._resolve_equity
        elif type_value == AssetType.CRYPTO.value:
            family, normalized, resolve = "crypto", raw_symbol, self._resolve_crypto
        elif type_value == AssetType.MUTUAL_FUND.value:
            self.unsupported += 1
            logger.info("[QUOTE][no_source] type=%s symbol=%s", type_value, raw_symbol)
            return None
        elif type_value in _NO_REALTIME_TYPES:
            self.unsupported += 1
            logger.info("[QUOTE][no_realtime_pricing] type=%s symbol=%s", type_value, raw_symbol)
            return None
        else:
            self.unsupported += 1
            logger.warning("[QUOTE][unknown_type] type=%s symbol=%s", type_value, raw_symbol)
            return None

        if not normalized:
            return None

        self.lookups += 1
        cache_key = f"{family}:{normalized.upper()}"
        if self.quote_cache is not None:
            cached = self.quote_cache.get(cache_key)
            if cached is not None:
                self.cache_hits += 1
                return cached

        quote = await resolve(normalized)
        if quote is None or quote.price <= 0:
            self.unavailable += 1
            return None

        if self.quote_cache is not None:
            self.quote_cache.put(cache_key, quote)
        return quote

    def metrics(self) -> dict[str, int | dict[str, int]]:
        return {
            "lookups": self.lookups,
            "cache_hits": self.cache_hits,
            "secondary_fallbacks": self.secondary_fallbacks,
            "unavailable": self.unavailable,
            "unsupported": self.unsupported,
            "primary_failures": dict(self.primary_failures),
        }
