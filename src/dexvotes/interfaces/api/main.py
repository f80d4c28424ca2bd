# --- src/dexvotes/interfaces/api/main.py ---
import logging
import os
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from dexvotes import __version__
from dexvotes.config import Settings, settings
from dexvotes.boot import build_services, close_services
from dexvotes.logging_conf import setup_logging
from dexvotes.interfaces.api.metrics import router as metrics_router, track_requests
from dexvotes.interfaces.api.routers import og as og_router
from dexvotes.interfaces.api.routers import pages as pages_router
from dexvotes.interfaces.api.routers import token_api as token_router

log = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def create_app(cfg: Optional[Settings] = None) -> FastAPI:
    cfg = cfg or settings
    app = FastAPI(title="DexScreener Votes Preview API", version=__version__)
    app.state.settings = cfg
    app.state.services = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cfg.CORS_ORIGINS.split(",") if o.strip()],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    if cfg.METRICS_ENABLED:
        app.middleware("http")(track_requests)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.on_event("startup")
    async def on_startup():
        setup_logging(cfg.LOG_LEVEL)
        log.info("🚀 Application startup sequence initiated...")
        # Tests may pre-populate services with fakes.
        if app.state.services is None:
            app.state.services = build_services(cfg)
        log.info("🚀 Application startup complete.")

    @app.on_event("shutdown")
    async def on_shutdown():
        if app.state.services:
            await close_services(app.state.services)

    @app.get("/health")
    def health_check(): return {"status": "ok"}

    if cfg.METRICS_ENABLED:
        app.include_router(metrics_router)
    app.include_router(token_router.router)
    app.include_router(og_router.router)
    # Catch-all: keep last.
    app.include_router(pages_router.router)
    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "dexvotes.interfaces.api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "3000")),
    )
