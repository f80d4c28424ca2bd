# tests/conftest.py
"""
Fixtures and test setup for the Pytest suite.
"""

import os
import random
from io import BytesIO
from typing import Any, Dict, List

import pytest

# Set test environment variables BEFORE any application code is imported.
os.environ["ENV"] = "test"
os.environ["OG_RASTER_ENABLED"] = "false"
os.environ["IMAGE_CACHE_BACKEND"] = "memory"

import httpx
from PIL import Image

from dexvotes.config import Settings


def make_pair(
    name: str = "Bonk",
    symbol: str = "BONK",
    chain: str = "solana",
    liquidity: Any = 1000.0,
    **extra: Any,
) -> Dict[str, Any]:
    """Upstream-shaped pair payload."""
    payload: Dict[str, Any] = {
        "chainId": chain,
        "dexId": "raydium",
        "url": f"https://dexscreener.com/{chain}/pair",
        "pairAddress": f"PAIR{symbol}",
        "baseToken": {"address": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", "name": name, "symbol": symbol},
        "quoteToken": {"symbol": "SOL"},
        "priceUsd": "0.00002345",
        "liquidity": {"usd": liquidity},
        "volume": {"h24": 1_250_000},
        "fdv": 1_500_000_000,
        "marketCap": 1_400_000_000,
        "priceChange": {"h24": 4.2},
    }
    payload.update(extra)
    return payload


def make_payload(pairs: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"schemaVersion": "1.0.0", "pairs": pairs}


class FakeClock:
    """Callable clock returning epoch seconds; advance() moves it forward."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRasterizer:
    """Produces a deterministic PNG of the requested size, ignoring the SVG content."""

    def __init__(self):
        self.calls = 0

    def rasterize(self, svg: str, width: int, height: int) -> bytes:
        self.calls += 1
        img = Image.new("RGBA", (width, height), (2, 2, 3, 255))
        out = BytesIO()
        img.save(out, format="PNG")
        return out.getvalue()


class BrokenRasterizer:
    def rasterize(self, svg: str, width: int, height: int) -> bytes:
        raise RuntimeError("cairo exploded")


def png_bytes(size=(64, 64), color=(255, 0, 0, 255)) -> bytes:
    out = BytesIO()
    Image.new("RGBA", size, color).save(out, format="PNG")
    return out.getvalue()


def json_transport(payload: Any, status_code: int = 200, calls: list = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=payload)
    return httpx.MockTransport(handler)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    template = tmp_path / "index.html"
    template.write_text(
        "<title>{{PAGE_TITLE}}</title>"
        '<meta property="og:title" content="{{OG_TITLE}}">'
        '<meta property="og:description" content="{{OG_DESCRIPTION}}">'
        '<meta property="og:image" content="{{OG_IMAGE}}">'
        '<meta name="twitter:title" content="{{TWITTER_TITLE}}">'
        '<meta name="twitter:description" content="{{TWITTER_DESCRIPTION}}">'
        '<meta name="twitter:image" content="{{TWITTER_IMAGE}}">'
        '<link rel="icon" href="{{ICON_URL}}">'
        '<meta name="token-address" content="{{TOKEN_ADDRESS}}">'
        "{{UNKNOWN_TOKEN}}",
        encoding="utf-8",
    )
    return Settings(
        ENV="test",
        TEMPLATE_PATH=str(template),
        OG_RASTER_ENABLED=False,
        IMAGE_CACHE_BACKEND="memory",
        IMAGE_CACHE_DIR=str(tmp_path / "og_cache"),
        METRICS_ENABLED=True,
    )
