from __future__ import annotations

import logging

from portfolio_quotes.errors import SearchQueryTooShortError
from portfolio_quotes.schemas.asset import SearchResult

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2

# Static reference data until a live provider search is wired in.
_STOCKS = [
    ("AAPL", "Apple Inc.", 150.25),
    ("GOOGL", "Alphabet Inc.", 2750.80),
    ("MSFT", "Microsoft Corporation", 310.45),
    ("AMZN", "Amazon.com Inc.", 3200.00),
    ("TSLA", "Tesla Inc.", 850.30),
    ("META", "Meta Platforms Inc.", 180.50),
    ("NVDA", "NVIDIA Corporation", 450.75),
    ("NFLX", "Netflix Inc.", 420.10),
]

_CRYPTO = [
    ("BTC", "Bitcoin", 45000.00),
    ("ETH", "Ethereum", 3200.00),
    ("ADA", "Cardano", 1.25),
    ("SOL", "Solana", 95.50),
    ("DOT", "Polkadot", 18.75),
    ("LINK", "Chainlink", 22.40),
    ("UNI", "Uniswap", 15.80),
    ("MATIC", "Polygon", 1.45),
]


def validate_search_query(query: str | None) -> str:
    value = (query or "").strip()
    if len(value) < MIN_QUERY_LENGTH:
        raise SearchQueryTooShortError(value, MIN_QUERY_LENGTH)
    return value


class SymbolCatalog:
    """Substring search over a fixed symbol list."""

    def __init__(self, asset_type: str, rows: list[tuple[str, str, float]]) -> None:
        self.asset_type = asset_type
        self._rows = [
            SearchResult(symbol=symbol, name=name, price=price, type=asset_type)
            for symbol, name, price in rows
        ]

    def search(self, query: str) -> list[SearchResult]:
        needle = query.lower()
        found = [
            row
            for row in self._rows
            if needle in row.symbol.lower() or needle in row.name.lower()
        ]
        logger.info("[SEARCH][%s] query=%s found=%s", self.asset_type, query, len(found))
        return found


stock_catalog = SymbolCatalog("stock", _STOCKS)
crypto_catalog = SymbolCatalog("crypto", _CRYPTO)


def search_stocks(query: str) -> list[SearchResult]:
    return stock_catalog.search(query)


def search_crypto(query: str) -> list[SearchResult]:
    return crypto_catalog.search(query)
