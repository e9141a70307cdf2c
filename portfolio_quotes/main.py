from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from portfolio_quotes.api.routes import router
from portfolio_quotes.config.settings import get_settings
from portfolio_quotes.services.market_data import build_market_data_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    service = getattr(app.state, "market_data", None)
    if service is None:
        service = build_market_data_service(settings)
        app.state.market_data = service
    session = httpx.AsyncClient(timeout=settings.MARKET_DATA_TIMEOUT_SEC, follow_redirects=True)
    bind = getattr(service, "bind_session", None)
    if bind is not None:
        bind(session)
    logger.info("[APP][http_session_open] timeout=%s", settings.MARKET_DATA_TIMEOUT_SEC)

    try:
        yield
    finally:
        if bind is not None:
            bind(None)
        await session.aclose()
        logger.info("[APP][http_session_closed]")


app = FastAPI(title="Portfolio Quotes", version="0.1.0", lifespan=lifespan)
app.include_router(router, prefix="/v1")

app.state.get_settings = get_settings