from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from portfolio_quotes.schemas.asset import AssetType
from portfolio_quotes.schemas.quote import MarketOverview, Quote
from portfolio_quotes.services.quote_resolver import QuoteResolver

logger = logging.getLogger(__name__)

DEFAULT_OVERVIEW_SYMBOLS = ("SPY", "QQQ", "BTC")


class MarketOverviewService:
    """Headline snapshot: broad index proxy, tech index proxy, crypto benchmark."""

    def __init__(self, resolver: QuoteResolver, symbols=DEFAULT_OVERVIEW_SYMBOLS) -> None:
        primary, tech, crypto = symbols
        self.resolver = resolver
        self.targets = (
            ("primary_index", AssetType.ETF, primary),
            ("tech_index", AssetType.ETF, tech),
            ("crypto_benchmark", AssetType.CRYPTO, crypto),
        )

    async def get_market_overview(self) -> MarketOverview:
        results = await asyncio.gather(
            *(self.resolver.get_current_quote(asset_type, symbol) for _, asset_type, symbol in self.targets),
            return_exceptions=True,
        )

        fields: dict[str, float | None] = {}
        for (field, asset_type, symbol), result in zip(self.targets, results):
            if isinstance(result, BaseException):
                logger.error(
                    "[OVERVIEW][lookup_error] field=%s symbol=%s error=%s",
                    field,
                    symbol,
                    result,
                )
                fields[field] = None
            elif isinstance(result, Quote) and result.price > 0:
                fields[field] = result.price
            else:
                fields[field] = None

        overview = MarketOverview(resolved_at=datetime.now(timezone.utc), **fields)
        logger.info(
            "[OVERVIEW][resolved] available=%s",
            sum(1 for v in fields.values() if v is not None),
        )
        return overview
