import unittest
from datetime import datetime, timezone

from portfolio_quotes.schemas.quote import Quote
from portfolio_quotes.services.market_data import MarketDataService
from portfolio_quotes.services.market_overview import MarketOverviewService
from portfolio_quotes.services.price_updater import PriceUpdater
from portfolio_quotes.services.quote_cache import QuoteCache

RESOLVED_AT = datetime(2026, 1, 2, 15, 0, tzinfo=timezone.utc)


class StubResolver:
    def __init__(self, prices: dict) -> None:
        self.prices = prices
        self.calls: list[tuple] = []

    async def get_current_quote(self, asset_type, symbol):
        self.calls.append((asset_type, symbol))
        price = self.prices.get(symbol)
        if price is None:
            return None
        return Quote(symbol=symbol, price=price, resolved_at=RESOLVED_AT, source="stub")


class RecordingStore:
    def __init__(self, fail_ids: set | None = None) -> None:
        self.fail_ids = fail_ids or set()
        self.writes: list[tuple] = []

    def update_asset_price(self, asset_id, current_price, last_updated):
        if asset_id in self.fail_ids:
            raise ConnectionError("store unavailable")
        self.writes.append((asset_id, current_price, last_updated))


def _service(prices: dict) -> MarketDataService:
    resolver = StubResolver(prices)
    return MarketDataService(
        resolver=resolver,
        updater=PriceUpdater(resolver, delay_sec=0),
        overview=MarketOverviewService(resolver),
        quote_cache=QuoteCache(ttl_sec=60),
    )


class RefreshAndPersistTest(unittest.IsolatedAsyncioTestCase):
    async def test_refreshed_prices_are_written_back(self):
        service = _service({"AAPL": 190.0, "BTC": 64000.0})
        store = RecordingStore()
        assets = [
            {"_id": "a1", "symbol": "AAPL", "type": "stock", "currentPrice": 150.0},
            {"_id": "a2", "symbol": "TBOND", "type": "bond", "currentPrice": 99.0},
            {"id": "a3", "symbol": "BTC", "type": "crypto", "currentPrice": 40000.0},
        ]

        result = await service.refresh_and_persist(assets, store)

        self.assertEqual([r["currentPrice"] for r in result], [190.0, 99.0, 64000.0])
        self.assertEqual(store.writes, [("a1", 190.0, RESOLVED_AT), ("a3", 64000.0, RESOLVED_AT)])
        self.assertEqual(assets[0]["currentPrice"], 150.0)

    async def test_generator_input_is_consumed_once(self):
        service = _service({"AAPL": 190.0})
        store = RecordingStore()
        assets = ({"_id": f"a{i}", "symbol": "AAPL", "type": "stock", "currentPrice": 1.0} for i in range(2))

        result = await service.refresh_and_persist(assets, store)

        self.assertEqual(len(result), 2)
        self.assertEqual([w[0] for w in store.writes], ["a0", "a1"])

    async def test_store_failure_still_returns_refreshed_batch(self):
        service = _service({"AAPL": 190.0, "MSFT": 420.0})
        store = RecordingStore(fail_ids={"a1"})
        assets = [
            {"_id": "a1", "symbol": "AAPL", "type": "stock", "currentPrice": 1.0},
            None,
            {"_id": "a2", "symbol": "MSFT", "type": "stock", "currentPrice": 2.0},
        ]

        result = await service.refresh_and_persist(assets, store)

        self.assertEqual(result[0]["currentPrice"], 190.0)
        self.assertIsNone(result[1])
        self.assertEqual(store.writes, [("a2", 420.0, RESOLVED_AT)])


if __name__ == "__main__":
    unittest.main()
