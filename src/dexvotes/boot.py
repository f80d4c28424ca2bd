# File: src/dexvotes/boot.py
"""
Builds and wires every service. The FastAPI app calls `build_services` once at
startup and keeps the result in `app.state.services`; the caches created here
live exactly as long as the app.
"""

import logging
import random
import time
from typing import Any, Callable, Dict, Optional

import httpx

from dexvotes.config import Settings, settings as default_settings
from dexvotes.application.services import (
    TokenDataService,
    PreviewImageService,
    PageRenderer,
    build_image_composer,
)
from dexvotes.infrastructure.cache import FileArtifactStore, InMemoryCache, NullCache
from dexvotes.infrastructure.market.dexscreener_client import build_dexscreener_client
from dexvotes.infrastructure.media.icon_overlay import IconFetcher
from dexvotes.infrastructure.media.rasterizer import SvgRasterizer, detect_rasterizer

log = logging.getLogger(__name__)

_AUTO = object()


def build_image_store(cfg: Settings, clock: Callable[[], float] = time.time) -> InMemoryCache:
    backend = (cfg.IMAGE_CACHE_BACKEND or "memory").lower()
    if backend == "disk":
        return FileArtifactStore(cfg.IMAGE_CACHE_DIR, ttl_seconds=cfg.IMAGE_CACHE_TTL_SECONDS, clock=clock)
    if backend == "none":
        return NullCache(clock=clock)
    if backend != "memory":
        log.warning(f"Unknown IMAGE_CACHE_BACKEND '{backend}', using memory.")
    return InMemoryCache(ttl_seconds=cfg.IMAGE_CACHE_TTL_SECONDS, clock=clock)


def build_services(
    cfg: Optional[Settings] = None,
    *,
    market_transport: Optional[httpx.AsyncBaseTransport] = None,
    icon_transport: Optional[httpx.AsyncBaseTransport] = None,
    rasterizer: Any = _AUTO,
    rng: Optional[random.Random] = None,
    clock: Callable[[], float] = time.time,
) -> Dict[str, Any]:
    """Build and wire all application services and dependencies."""
    cfg = cfg or default_settings
    log.info("Building application services...")
    services: Dict[str, Any] = {}

    try:
        client = build_dexscreener_client(cfg, transport=market_transport)
        services["dexscreener_client"] = client

        token_cache = InMemoryCache(ttl_seconds=cfg.TOKEN_CACHE_TTL_SECONDS, clock=clock)
        services["token_cache"] = token_cache
        token_data = TokenDataService(client=client, cache=token_cache)
        services["token_data_service"] = token_data

        if rasterizer is _AUTO:
            rasterizer = detect_rasterizer(cfg.OG_RASTER_ENABLED)
        raster: Optional[SvgRasterizer] = rasterizer

        icon_fetcher = None
        if raster is not None:
            icon_fetcher = IconFetcher(
                url_template=cfg.ICON_URL_TEMPLATE,
                timeout=cfg.ICON_FETCH_TIMEOUT_SECONDS,
                transport=icon_transport,
            )
        services["icon_fetcher"] = icon_fetcher

        composer = build_image_composer(raster, icon_fetcher=icon_fetcher, rng=rng)
        services["image_composer"] = composer

        image_store = build_image_store(cfg, clock=clock)
        services["image_store"] = image_store
        services["preview_image_service"] = PreviewImageService(
            token_data=token_data, composer=composer, store=image_store
        )

        services["page_renderer"] = PageRenderer(
            token_data=token_data,
            template=PageRenderer.load_template(cfg.TEMPLATE_PATH),
            default_title=cfg.DEFAULT_PAGE_TITLE,
            default_og_title=cfg.DEFAULT_OG_TITLE,
            default_description=cfg.DEFAULT_OG_DESCRIPTION,
            default_image=cfg.DEFAULT_OG_IMAGE,
            image_mode=cfg.PREVIEW_IMAGE_MODE,
            screenshot_url_template=cfg.SCREENSHOT_URL_TEMPLATE,
            icon_url_template=cfg.ICON_URL_TEMPLATE,
        )

        log.info(
            f"✅ All services built (rasterizer={'on' if composer.can_rasterize else 'off'}, "
            f"image_cache={cfg.IMAGE_CACHE_BACKEND})."
        )
        return services

    except Exception as e:
        log.critical(f"❌ Service building failed: {e}", exc_info=True)
        raise


async def close_services(services: Dict[str, Any]) -> None:
    for name in ("dexscreener_client", "icon_fetcher"):
        client = services.get(name)
        if client is not None:
            await client.aclose()
