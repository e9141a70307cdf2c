from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, Mapping

from portfolio_quotes.services.quote_resolver import QuoteResolver

logger = logging.getLogger(__name__)


class PriceUpdater:
    """Sequential batch price refresh with a fixed pause between assets.

    Output is index-aligned with the input. An asset whose price cannot be
    resolved keeps its previous ``currentPrice``/``lastUpdated``.
    """

    def __init__(
        self,
        resolver: QuoteResolver,
        *,
        delay_sec: float = 0.2,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self.resolver = resolver
        self.delay_sec = delay_sec
        self._sleep = sleep or asyncio.sleep

        self.last_batch_size = 0
        self.last_batch_refreshed = 0

    async def _refresh_one(self, asset: Mapping[str, Any]) -> tuple[Any, bool]:
        try:
            out = dict(asset)
            symbol = asset.get("symbol")
            asset_type = asset.get("type")
            quote = await self.resolver.get_current_quote(asset_type, symbol)
        except Exception:
            logger.exception("[BATCH][asset_error] asset=%r", asset)
            return asset, False

        if quote is None or quote.price <= 0:
            logger.info(
                "[BATCH][kept_previous] symbol=%s type=%s current_price=%s",
                symbol,
                asset_type,
                asset.get("currentPrice"),
            )
            return out, False

        out["currentPrice"] = quote.price
        out["lastUpdated"] = quote.resolved_at
        return out, True

    async def update_prices(self, assets: Iterable[Mapping[str, Any]]) -> list[Any]:
        rows = list(assets)
        updated: list[Any] = []
        refreshed = 0

        for index, asset in enumerate(rows):
            if index > 0 and self.delay_sec > 0:
                await self._sleep(self.delay_sec)
            row, ok = await self._refresh_one(asset)
            refreshed += int(ok)
            updated.append(row)

        self.last_batch_size = len(rows)
        self.last_batch_refreshed = refreshed
        logger.info("[BATCH][update_prices] target_count=%s refreshed_count=%s", len(rows), refreshed)
        return updated

    def metrics(self) -> dict[str, int]:
        return {
            "batch_target_count": self.last_batch_size,
            "batch_refreshed_count": self.last_batch_refreshed,
        }
