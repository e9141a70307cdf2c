from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Protocol, Sequence

logger = logging.getLogger(__name__)


class AssetPriceStore(Protocol):
    def update_asset_price(self, asset_id: Any, current_price: float, last_updated: datetime | None) -> Any:
        ...


def _asset_id(row: Mapping[str, Any]) -> Any:
    if row.get("_id") is not None:
        return row["_id"]
    return row.get("id")


def persist_price_updates(
    originals: Sequence[Mapping[str, Any]],
    updated: Sequence[Mapping[str, Any]],
    store: AssetPriceStore,
) -> int:
    """Write refreshed prices back to storage, matching records by position.

    Only rows with a positive ``currentPrice`` that actually changed are
    written. A failing write is logged and the remaining rows still go through.
    """
    if len(originals) != len(updated):
        raise ValueError("originals and updated must be index-aligned")

    persisted = 0
    for original, row in zip(originals, updated):
        if not isinstance(row, Mapping) or not isinstance(original, Mapping):
            continue
        price = row.get("currentPrice")
        if not isinstance(price, (int, float)) or price <= 0:
            continue
        if price == original.get("currentPrice") and row.get("lastUpdated") == original.get("lastUpdated"):
            continue

        asset_id = _asset_id(row)
        if asset_id is None:
            logger.warning("[SYNC][missing_id] symbol=%s", row.get("symbol"))
            continue

        try:
            store.update_asset_price(asset_id, float(price), row.get("lastUpdated"))
        except Exception:
            logger.exception("[SYNC][write_failed] asset_id=%s symbol=%s", asset_id, row.get("symbol"))
            continue
        persisted += 1

    logger.info("[SYNC][persist_price_updates] target_count=%s persisted_count=%s", len(updated), persisted)
    return persisted
