from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from portfolio_quotes.errors import SearchQueryTooShortError, UnsupportedAssetTypeError
from portfolio_quotes.schemas.asset import AssetPriceRequest, AssetType
from portfolio_quotes.services.symbol_search import validate_search_query

router = APIRouter()


def _service(request: Request):
    return request.app.state.market_data


def _parse_asset_type(raw: str) -> AssetType:
    try:
        return AssetType(raw.strip().lower())
    except ValueError as exc:
        raise UnsupportedAssetTypeError(raw) from exc


def _quote_response(symbol: str, quote) -> dict:
    return {
        'symbol': symbol,
        'quote': quote.model_dump(mode='json') if quote is not None else None,
    }


@router.get('/quotes/stocks/{symbol}')
async def get_stock_quote(symbol: str, request: Request):
    quote = await _service(request).get_current_quote(AssetType.STOCK, symbol.upper())
    return _quote_response(symbol.upper(), quote)


@router.get('/quotes/crypto/{symbol}')
async def get_crypto_quote(symbol: str, request: Request):
    quote = await _service(request).get_current_quote(AssetType.CRYPTO, symbol)
    return _quote_response(symbol, quote)


@router.get('/quotes/{asset_type}/{symbol}')
async def get_quote(asset_type: str, symbol: str, request: Request):
    try:
        parsed = _parse_asset_type(asset_type)
    except UnsupportedAssetTypeError as exc:
        raise HTTPException(status_code=400, detail='UNSUPPORTED_ASSET_TYPE') from exc
    quote = await _service(request).get_current_quote(parsed, symbol)
    return _quote_response(symbol, quote)


@router.post('/prices/refresh')
async def refresh_prices(assets: list[dict[str, Any]], request: Request):
    rows = []
    for raw in assets:
        try:
            AssetPriceRequest.model_validate(raw)
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=exc.errors(include_url=False)) from exc
        rows.append(dict(raw))
    return await _service(request).update_prices(rows)


@router.get('/market/overview')
async def market_overview(request: Request):
    overview = await _service(request).get_market_overview()
    return overview.model_dump(mode='json')


@router.get('/search/stocks')
def search_stocks(request: Request, query: str | None = None):
    try:
        value = validate_search_query(query)
    except SearchQueryTooShortError as exc:
        raise HTTPException(status_code=400, detail='SEARCH_QUERY_TOO_SHORT') from exc
    return [row.model_dump() for row in _service(request).search_stocks(value)]


@router.get('/search/crypto')
def search_crypto(request: Request, query: str | None = None):
    try:
        value = validate_search_query(query)
    except SearchQueryTooShortError as exc:
        raise HTTPException(status_code=400, detail='SEARCH_QUERY_TOO_SHORT') from exc
    return [row.model_dump() for row in _service(request).search_crypto(value)]


@router.delete('/cache')
def clear_cache(request: Request):
    removed = _service(request).clear_cache()
    return {'cleared': removed}


@router.get('/cache/stats')
def cache_stats(request: Request):
    return _service(request).cache_stats()


@router.get('/metrics/quote')
def quote_metrics(request: Request):
    return _service(request).metrics()
