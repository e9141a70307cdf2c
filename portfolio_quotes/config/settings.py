import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, field_validator


class Settings(BaseModel):
    ALPHA_VANTAGE_KEY: str | None = None
    ALPHA_VANTAGE_BASE_URL: str = "https://www.alphavantage.co"
    YAHOO_CHART_BASE_URL: str = "https://query1.finance.yahoo.com"
    COINGECKO_BASE_URL: str = "https://api.coingecko.com/api/v3"
    MARKET_DATA_TIMEOUT_SEC: float = 8.0
    PRICE_UPDATE_DELAY_SEC: float = 0.2
    QUOTE_CACHE_TTL_SEC: int = 60
    MARKET_OVERVIEW_SYMBOLS: list[str] = ["SPY", "QQQ", "BTC"]
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("MARKET_DATA_TIMEOUT_SEC")
    @classmethod
    def positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("MARKET_DATA_TIMEOUT_SEC must be positive")
        return value

    @field_validator("PRICE_UPDATE_DELAY_SEC", "QUOTE_CACHE_TTL_SEC")
    @classmethod
    def non_negative(cls, value):
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("MARKET_OVERVIEW_SYMBOLS")
    @classmethod
    def three_overview_symbols(cls, value: list[str]) -> list[str]:
        if len(value) != 3:
            raise ValueError("MARKET_OVERVIEW_SYMBOLS needs exactly 3 symbols")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        raw: dict = {}
        for name in (
            "ALPHA_VANTAGE_KEY",
            "ALPHA_VANTAGE_BASE_URL",
            "YAHOO_CHART_BASE_URL",
            "COINGECKO_BASE_URL",
            "MARKET_DATA_TIMEOUT_SEC",
            "PRICE_UPDATE_DELAY_SEC",
            "QUOTE_CACHE_TTL_SEC",
            "LOG_LEVEL",
        ):
            value = os.getenv(name)
            if value is not None and value.strip():
                raw[name] = value.strip()
        if "LOG_LEVEL" in raw:
            raw["LOG_LEVEL"] = raw["LOG_LEVEL"].upper()

        raw_overview = os.getenv("MARKET_OVERVIEW_SYMBOLS")
        if raw_overview is not None:
            raw["MARKET_OVERVIEW_SYMBOLS"] = [s.strip() for s in raw_overview.split(",") if s.strip()]

        return cls.model_validate(raw)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
