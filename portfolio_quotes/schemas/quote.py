from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    resolved_at: datetime
    source: str


class FailureKind(str, Enum):
    RATE_LIMITED = "RATE_LIMITED"
    NO_DATA = "NO_DATA"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"


class ProviderFailure(BaseModel):
    kind: FailureKind
    provider: str
    symbol: str
    detail: str | None = None


ProviderResult = Quote | ProviderFailure


class MarketOverview(BaseModel):
    primary_index: float | None = None
    tech_index: float | None = None
    crypto_benchmark: float | None = None
    resolved_at: datetime
