from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import httpx

from portfolio_quotes.schemas.quote import FailureKind, ProviderFailure, Quote

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 8.0


class QuoteProviderClient:
    """Shared HTTP plumbing for single-provider quote adapters.

    Subclasses implement ``fetch_quote(symbol)`` and must return either a
    ``Quote`` or a ``ProviderFailure``; expected failure modes never raise.
    """

    provider = "unknown"
    not_found_kind = FailureKind.TRANSPORT_ERROR

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        session: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session

    async def _get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        if self.session is not None:
            return await self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, params=params, headers=headers)

    async def _get_json(
        self,
        symbol: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Tuple[Any, Optional[ProviderFailure]]:
        try:
            response = await self._get(url, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            return None, self._failure(FailureKind.TRANSPORT_ERROR, symbol, f"timeout: {exc}")
        except httpx.HTTPError as exc:
            return None, self._failure(FailureKind.TRANSPORT_ERROR, symbol, f"{type(exc).__name__}: {exc}")

        status = response.status_code
        if status == 429:
            return None, self._failure(FailureKind.RATE_LIMITED, symbol, "HTTP 429")
        if status == 404:
            return None, self._failure(self.not_found_kind, symbol, "HTTP 404")
        if not response.is_success:
            return None, self._failure(FailureKind.TRANSPORT_ERROR, symbol, f"HTTP {status}")

        try:
            return response.json(), None
        except ValueError as exc:
            return None, self._failure(FailureKind.TRANSPORT_ERROR, symbol, f"invalid json: {exc}")

    def _failure(self, kind: FailureKind, symbol: str, detail: Optional[str] = None) -> ProviderFailure:
        logger.warning(
            "[PROVIDER][failure] provider=%s symbol=%s kind=%s detail=%s",
            self.provider,
            symbol,
            kind.value,
            detail,
        )
        return ProviderFailure(kind=kind, provider=self.provider, symbol=symbol, detail=detail)

    def _quote(self, symbol: str, price: float, change: float, change_percent: float) -> Quote:
        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            resolved_at=datetime.now(timezone.utc),
            source=self.provider,
        )

    @staticmethod
    def _to_float(value: Any, default: float = 0.0) -> float:
        try:
            if value is None or value == "":
                return default
            if isinstance(value, str):
                value = value.strip().rstrip("%").replace(",", "")
            result = float(value)
        except (TypeError, ValueError):
            return default
        if result != result or result in (float("inf"), float("-inf")):
            return default
        return result

    async def fetch_quote(self, symbol: str):
        raise NotImplementedError
