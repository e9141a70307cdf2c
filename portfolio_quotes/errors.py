class MarketDataError(Exception):
    """Base error for the quote resolution layer."""


class SearchQueryTooShortError(MarketDataError):
    def __init__(self, query: str, min_length: int = 2) -> None:
        super().__init__("SEARCH_QUERY_TOO_SHORT")
        self.query = query
        self.min_length = min_length


class UnsupportedAssetTypeError(MarketDataError):
    def __init__(self, asset_type: str) -> None:
        super().__init__("UNSUPPORTED_ASSET_TYPE")
        self.asset_type = asset_type
