from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.dashboard import build_default_dashboard


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    dashboard = build_default_dashboard()
    await dashboard.start()
    try:
        yield
    finally:
        await dashboard.shutdown()
        build_default_dashboard.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Thermo Dashboard",
        description="Historical chart, live readings and admin actions for a temperature sensor device.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
