from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

import httpx

from portfolio_quotes.config.settings import Settings
from portfolio_quotes.integrations.alpha_vantage import AlphaVantageClient
from portfolio_quotes.integrations.coingecko import CoinGeckoClient
from portfolio_quotes.integrations.yahoo_chart import YahooChartClient
from portfolio_quotes.schemas.asset import SearchResult
from portfolio_quotes.schemas.quote import MarketOverview, Quote
from portfolio_quotes.services import symbol_search
from portfolio_quotes.services.market_overview import MarketOverviewService
from portfolio_quotes.services.price_sync import AssetPriceStore, persist_price_updates
from portfolio_quotes.services.price_updater import PriceUpdater
from portfolio_quotes.services.quote_cache import QuoteCache
from portfolio_quotes.services.quote_resolver import QuoteResolver


class MarketDataService:
    """Entry point used by portfolio, asset and watchlist flows."""

    def __init__(
        self,
        *,
        resolver: QuoteResolver,
        updater: PriceUpdater,
        overview: MarketOverviewService,
        quote_cache: QuoteCache,
    ) -> None:
        self.resolver = resolver
        self.updater = updater
        self.overview = overview
        self.quote_cache = quote_cache

    async def get_current_quote(self, asset_type, symbol: str) -> Quote | None:
        return await self.resolver.get_current_quote(asset_type, symbol)

    async def update_prices(self, assets: Iterable[Mapping[str, Any]]) -> list[Any]:
        return await self.updater.update_prices(assets)

    async def refresh_and_persist(self, assets: Iterable[Mapping[str, Any]], store: AssetPriceStore) -> list[Any]:
        """Refresh a batch and write changed prices back through ``store``."""
        rows = list(assets)
        updated = await self.updater.update_prices(rows)
        persist_price_updates(rows, updated, store)
        return updated

    async def get_market_overview(self) -> MarketOverview:
        return await self.overview.get_market_overview()

    def search_stocks(self, query: str) -> list[SearchResult]:
        return symbol_search.search_stocks(query)

    def search_crypto(self, query: str) -> list[SearchResult]:
        return symbol_search.search_crypto(query)

    def clear_cache(self) -> int:
        return self.quote_cache.clear()

    def cache_stats(self) -> dict:
        return self.quote_cache.stats()

    def metrics(self) -> dict:
        out: dict = dict(self.resolver.metrics())
        out.update(self.updater.metrics())
        return out

    def bind_session(self, session: Optional[httpx.AsyncClient]) -> None:
        for client in (self.resolver.equity_primary, self.resolver.equity_secondary, self.resolver.crypto_client):
            client.session = session


def build_market_data_service(
    settings: Settings,
    *,
    session: Optional[httpx.AsyncClient] = None,
    quote_cache: QuoteCache | None = None,
) -> MarketDataService:
    timeout = settings.MARKET_DATA_TIMEOUT_SEC
    cache = quote_cache or QuoteCache(ttl_sec=settings.QUOTE_CACHE_TTL_SEC)
    resolver = QuoteResolver(
        equity_primary=AlphaVantageClient(
            api_key=settings.ALPHA_VANTAGE_KEY,
            base_url=settings.ALPHA_VANTAGE_BASE_URL,
            timeout=timeout,
            session=session,
        ),
        equity_secondary=YahooChartClient(
            base_url=settings.YAHOO_CHART_BASE_URL,
            timeout=timeout,
            session=session,
        ),
        crypto_client=CoinGeckoClient(
            base_url=settings.COINGECKO_BASE_URL,
            timeout=timeout,
            session=session,
        ),
        quote_cache=cache,
    )
    return MarketDataService(
        resolver=resolver,
        updater=PriceUpdater(resolver, delay_sec=settings.PRICE_UPDATE_DELAY_SEC),
        overview=MarketOverviewService(resolver, symbols=tuple(settings.MARKET_OVERVIEW_SYMBOLS)),
        quote_cache=cache,
    )
