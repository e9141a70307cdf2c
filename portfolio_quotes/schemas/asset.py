from enum import Enum

from pydantic import BaseModel, ConfigDict


class AssetType(str, Enum):
    STOCK = "stock"
    CRYPTO = "crypto"
    BOND = "bond"
    ETF = "etf"
    MUTUAL_FUND = "mutual-fund"
    REAL_ESTATE = "real-estate"
    COMMODITY = "commodity"
    OTHER = "other"


class AssetPriceRequest(BaseModel):
    """Portfolio asset as sent by callers; unknown keys pass through."""

    model_config = ConfigDict(extra="allow")

    symbol: str
    type: str
    currentPrice: float | None = None


class SearchResult(BaseModel):
    symbol: str
    name: str
    price: float
    type: str
