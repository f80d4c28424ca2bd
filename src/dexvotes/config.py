# src/dexvotes/config.py
"""
Application settings loaded from the environment (and an optional .env file).

Upstream request policy (User-Agent on/off, IPv4-only transport) lives here so it
can be flipped per deployment; some hosts throttle or time out depending on it.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    ENV: str = Field(default="dev")
    LOG_LEVEL: str | None = None

    # Upstream market data (DexScreener)
    DEXSCREENER_BASE_URL: str = "https://api.dexscreener.com"
    UPSTREAM_TIMEOUT_SECONDS: float = 8.0
    UPSTREAM_SEND_USER_AGENT: bool = True
    UPSTREAM_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
    )
    UPSTREAM_FORCE_IPV4: bool = True

    # Caches
    TOKEN_CACHE_TTL_SECONDS: int = 300
    IMAGE_CACHE_TTL_SECONDS: int = 300
    IMAGE_CACHE_BACKEND: str = "memory"  # memory | disk | none
    IMAGE_CACHE_DIR: str = "./og_cache"

    # Preview images
    OG_RASTER_ENABLED: bool = True
    OG_ALLOW_SVG_FALLBACK: bool = True
    ICON_FETCH_TIMEOUT_SECONDS: float = 5.0
    ICON_URL_TEMPLATE: str = "https://dd.dexscreener.com/ds-data/tokens/{chain}/{address}.png"

    # Page rendering
    PREVIEW_IMAGE_MODE: str = "self"  # self | screenshot
    SCREENSHOT_URL_TEMPLATE: str = "https://image.thum.io/get/width/1200/crop/630/wait/3/noanimate/{url}"
    TEMPLATE_PATH: str | None = None
    DEFAULT_PAGE_TITLE: str = "DexScreener Votes • Elite Terminal"
    DEFAULT_OG_TITLE: str = "Vote to Earn — DexScreener CORE"
    DEFAULT_OG_DESCRIPTION: str = "🗳 Vote and earn rewards from the community voting pool"
    DEFAULT_OG_IMAGE: str = ""

    # API
    CORS_ORIGINS: str = "*"

    # Observability
    METRICS_ENABLED: bool = True


settings = Settings()
