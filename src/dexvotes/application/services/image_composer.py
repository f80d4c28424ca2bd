#--- src/dexvotes/application/services/image_composer.py ---
"""
Preview image composition (1200x630).

The scene is always built as SVG. `VectorImageComposer` returns it as-is;
`RasterImageComposer` converts it to PNG and then tries to paste the token's
icon over the identity circle. The icon step is best-effort: when it fails the
rasterized base image is returned byte-for-byte unchanged.

Vote numbers are synthetic and drawn from the injected `random.Random`.
"""

import asyncio
import logging
import math
import random
from typing import Optional

from dexvotes.application.formatters import (
    chain_reward_symbol,
    escape_xml,
    format_count,
    format_magnitude,
    format_price,
    truncate,
)
from dexvotes.domain.entities import (
    PNG_MEDIA_TYPE,
    SVG_MEDIA_TYPE,
    Pair,
    PreviewImageArtifact,
    VoteTally,
)
from dexvotes.domain.errors import IconFetchError
from dexvotes.infrastructure.media.icon_overlay import IconFetcher, overlay_circular_icon
from dexvotes.infrastructure.media.rasterizer import SvgRasterizer
from dexvotes.infrastructure.monitoring.metrics import ICON_OVERLAYS, PREVIEW_RENDERS

log = logging.getLogger(__name__)

WIDTH = 1200
HEIGHT = 630

NAME_LIMIT, NAME_KEEP = 18, 16
SYMBOL_LIMIT, SYMBOL_KEEP = 10, 8

VOTE_MIN = 800
VOTE_SPAN = 2500
PROGRESS_WIDTH = 420


def draw_vote_tally(rng: random.Random) -> VoteTally:
    """count in [800, 3300); total chosen so count is 40-90% of it."""
    count = math.floor(VOTE_MIN + rng.random() * VOTE_SPAN)
    total = math.ceil(count / (0.4 + rng.random() * 0.5))
    percent = math.floor(count / total * 100 + 0.5)
    return VoteTally(count=count, total=total, percent=percent)


def build_scene(pair: Pair, tally: VoteTally) -> str:
    chain_up = (pair.chain_id or "unknown").upper()
    reward = chain_reward_symbol(pair.chain_id)

    name = truncate(pair.display_name, NAME_LIMIT, NAME_KEEP)
    sym = truncate(pair.display_symbol.upper(), SYMBOL_LIMIT, SYMBOL_KEEP)

    price = format_price(pair.price_usd)
    mcap = format_magnitude(pair.display_market_cap)
    liq = format_magnitude(pair.liquidity_usd)
    vol = format_magnitude(pair.volume_h24)

    count_str = format_count(tally.count)
    total_str = format_count(tally.total)
    bar_width = min(PROGRESS_WIDTH, PROGRESS_WIDTH * tally.percent / 100)
    badge_w = len(chain_up) * 12 + 40

    return f"""<svg width="{WIDTH}" height="{HEIGHT}" xmlns="http://www.w3.org/2000/svg">
  <defs>
    <linearGradient id="bgGrad" x1="0%" y1="0%" x2="100%" y2="100%">
      <stop offset="0%" stop-color="#020203"/>
      <stop offset="50%" stop-color="#050506"/>
      <stop offset="100%" stop-color="#020203"/>
    </linearGradient>
    <linearGradient id="cardGrad" x1="0%" y1="0%" x2="100%" y2="100%">
      <stop offset="0%" stop-color="#0a0b0e"/>
      <stop offset="100%" stop-color="#060708"/>
    </linearGradient>
    <linearGradient id="greenGrad" x1="0%" y1="0%" x2="100%" y2="0%">
      <stop offset="0%" stop-color="#16a34a"/>
      <stop offset="50%" stop-color="#22c55e"/>
      <stop offset="100%" stop-color="#10b981"/>
    </linearGradient>
    <radialGradient id="orbGlow1" cx="20%" cy="20%" r="50%">
      <stop offset="0%" stop-color="#22c55e" stop-opacity="0.12"/>
      <stop offset="100%" stop-color="#22c55e" stop-opacity="0"/>
    </radialGradient>
    <radialGradient id="orbGlow2" cx="80%" cy="80%" r="50%">
      <stop offset="0%" stop-color="#22c55e" stop-opacity="0.08"/>
      <stop offset="100%" stop-color="#22c55e" stop-opacity="0"/>
    </radialGradient>
  </defs>

  <rect width="{WIDTH}" height="{HEIGHT}" fill="url(#bgGrad)"/>
  <rect width="{WIDTH}" height="{HEIGHT}" fill="url(#orbGlow1)"/>
  <rect width="{WIDTH}" height="{HEIGHT}" fill="url(#orbGlow2)"/>

  <rect x="30" y="30" width="1140" height="570" rx="24" fill="url(#cardGrad)" stroke="#ffffff" stroke-opacity="0.08" stroke-width="1"/>

  <rect x="30" y="30" width="1140" height="65" rx="24" fill="#000000" fill-opacity="0.4"/>
  <rect x="30" y="75" width="1140" height="20" fill="url(#cardGrad)"/>
  <line x1="30" y1="95" x2="1170" y2="95" stroke="#ffffff" stroke-opacity="0.08" stroke-width="1"/>
  <text x="60" y="72" font-family="Arial,sans-serif" font-size="20" font-weight="bold" fill="white">DEXSCREENER</text>
  <text x="210" y="72" font-family="Arial,sans-serif" font-size="20" font-weight="bold" fill="#22c55e">VOTES</text>

  <rect x="{1140 - badge_w}" y="48" width="{badge_w}" height="30" rx="15" fill="#22c55e" fill-opacity="0.15"/>
  <text x="{1140 - badge_w / 2:g}" y="69" font-family="Arial,sans-serif" font-size="13" font-weight="bold" fill="#22c55e" text-anchor="middle">{escape_xml(chain_up)}</text>

  <circle cx="130" cy="220" r="60" fill="none" stroke="#22c55e" stroke-opacity="0.25" stroke-width="2"/>
  <circle cx="130" cy="220" r="52" fill="#22c55e" fill-opacity="0.1"/>
  <text x="130" y="235" font-family="Arial,sans-serif" font-size="40" font-weight="bold" fill="#22c55e" fill-opacity="0.8" text-anchor="middle">{escape_xml(sym[:1])}</text>

  <text x="210" y="200" font-family="Arial,sans-serif" font-size="38" font-weight="bold" fill="white">{escape_xml(name)}</text>
  <text x="210" y="235" font-family="Arial,sans-serif" font-size="20" fill="#ffffff" fill-opacity="0.4">${escape_xml(sym)}</text>
  <text x="210" y="295" font-family="Courier New,monospace" font-size="36" font-weight="bold" fill="#22c55e">{escape_xml(price)}</text>

  <rect x="60" y="330" width="170" height="70" rx="14" fill="#000000" fill-opacity="0.5" stroke="#ffffff" stroke-opacity="0.05" stroke-width="1"/>
  <text x="145" y="365" font-family="Courier New,monospace" font-size="18" font-weight="bold" fill="white" text-anchor="middle">{escape_xml(mcap)}</text>
  <text x="145" y="388" font-family="Arial,sans-serif" font-size="10" fill="#ffffff" fill-opacity="0.4" text-anchor="middle">MARKET CAP</text>

  <rect x="245" y="330" width="170" height="70" rx="14" fill="#000000" fill-opacity="0.5" stroke="#ffffff" stroke-opacity="0.05" stroke-width="1"/>
  <text x="330" y="365" font-family="Courier New,monospace" font-size="18" font-weight="bold" fill="white" text-anchor="middle">{escape_xml(liq)}</text>
  <text x="330" y="388" font-family="Arial,sans-serif" font-size="10" fill="#ffffff" fill-opacity="0.4" text-anchor="middle">LIQUIDITY</text>

  <rect x="430" y="330" width="170" height="70" rx="14" fill="#000000" fill-opacity="0.5" stroke="#ffffff" stroke-opacity="0.05" stroke-width="1"/>
  <text x="515" y="365" font-family="Courier New,monospace" font-size="18" font-weight="bold" fill="#22c55e" text-anchor="middle">{escape_xml(vol)}</text>
  <text x="515" y="388" font-family="Arial,sans-serif" font-size="10" fill="#ffffff" fill-opacity="0.4" text-anchor="middle">24H VOLUME</text>

  <rect x="660" y="120" width="480" height="300" rx="20" fill="#000000" fill-opacity="0.5" stroke="#ffffff" stroke-opacity="0.05" stroke-width="1"/>
  <text x="690" y="160" font-family="Arial,sans-serif" font-size="12" font-weight="bold" fill="#ffffff" fill-opacity="0.5">MILESTONE PROGRESS</text>
  <text x="1110" y="160" font-family="Arial,sans-serif" font-size="12" font-weight="bold" fill="#22c55e" text-anchor="end">{tally.percent}%</text>
  <text x="690" y="220" font-family="Arial,sans-serif" font-size="52" font-weight="bold" fill="white">{count_str}</text>
  <text x="{690 + len(count_str) * 30}" y="220" font-family="Arial,sans-serif" font-size="26" fill="#ffffff" fill-opacity="0.15">/{total_str}</text>

  <rect x="690" y="250" width="{PROGRESS_WIDTH}" height="14" rx="7" fill="#111111"/>
  <rect x="690" y="250" width="{bar_width:g}" height="14" rx="7" fill="url(#greenGrad)"/>

  <rect x="690" y="290" width="420" height="55" rx="14" fill="url(#greenGrad)"/>
  <text x="900" y="325" font-family="Arial,sans-serif" font-size="16" font-weight="bold" fill="black" text-anchor="middle">VOTE TO EARN {escape_xml(reward)} REWARD</text>
  <text x="900" y="395" font-family="Arial,sans-serif" font-size="11" fill="#ffffff" fill-opacity="0.3" text-anchor="middle">🔥 Community members voting in real-time</text>

  <rect x="60" y="430" width="540" height="80" rx="16" fill="#000000" fill-opacity="0.4" stroke="#ffffff" stroke-opacity="0.05" stroke-width="1"/>
  <text x="85" y="465" font-family="Arial,sans-serif" font-size="13" font-weight="bold" fill="#ffffff" fill-opacity="0.4">LIVE VOTES</text>
  <circle cx="165" cy="459" r="4" fill="#22c55e"/>
  <text x="85" y="490" font-family="Arial,sans-serif" font-size="11" fill="#ffffff" fill-opacity="0.2">Community members earning rewards</text>

  <rect x="620" y="430" width="520" height="80" rx="16" fill="#000000" fill-opacity="0.4" stroke="#ffffff" stroke-opacity="0.05" stroke-width="1"/>
  <text x="645" y="465" font-family="Arial,sans-serif" font-size="13" font-weight="bold" fill="#ffffff" fill-opacity="0.4">LIVE CHART</text>
  <text x="645" y="490" font-family="Courier New,monospace" font-size="11" fill="#ffffff" fill-opacity="0.2">{escape_xml(sym)}/USD</text>
  <polyline points="850,480 880,460 910,470 940,450 970,465 1000,445 1030,455 1060,435 1090,450 1110,440"
            fill="none" stroke="#22c55e" stroke-width="2" stroke-linecap="round" opacity="0.6"/>
</svg>"""


FALLBACK_SVG = f"""<svg width="{WIDTH}" height="{HEIGHT}" xmlns="http://www.w3.org/2000/svg">
  <rect width="{WIDTH}" height="{HEIGHT}" fill="#020203"/>
  <rect x="30" y="30" width="1140" height="570" rx="24" fill="#0a0b0e" stroke="#ffffff" stroke-opacity="0.08"/>
  <text x="600" y="290" font-family="Arial,sans-serif" font-size="32" font-weight="bold" fill="white" text-anchor="middle">DEXSCREENER</text>
  <text x="600" y="340" font-family="Arial,sans-serif" font-size="32" font-weight="bold" fill="#22c55e" text-anchor="middle">VOTES</text>
  <text x="600" y="400" font-family="Arial,sans-serif" font-size="20" fill="#ffffff" fill-opacity="0.5" text-anchor="middle">Vote to Earn SOL</text>
</svg>"""


class VectorImageComposer:
    """Serves the SVG scene itself. Used when no rasterizer is available."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @property
    def can_rasterize(self) -> bool:
        return False

    def build_svg(self, pair: Pair) -> str:
        return build_scene(pair, draw_vote_tally(self.rng))

    def _vector_artifact(self, svg: str, address: str) -> PreviewImageArtifact:
        PREVIEW_RENDERS.labels(media_type=SVG_MEDIA_TYPE).inc()
        return PreviewImageArtifact(content=svg.encode("utf-8"), media_type=SVG_MEDIA_TYPE, address=address)

    async def compose(self, pair: Pair, address: str) -> PreviewImageArtifact:
        return self._vector_artifact(self.build_svg(pair), address)

    async def compose_vector(self, pair: Pair, address: str) -> PreviewImageArtifact:
        return self._vector_artifact(self.build_svg(pair), address)

    def compose_fallback(self) -> PreviewImageArtifact:
        return PreviewImageArtifact(content=FALLBACK_SVG.encode("utf-8"), media_type=SVG_MEDIA_TYPE, address="")


class RasterImageComposer(VectorImageComposer):
    """Rasterizes the scene to PNG and overlays the token icon when it can be fetched."""

    def __init__(
        self,
        rasterizer: SvgRasterizer,
        icon_fetcher: Optional[IconFetcher] = None,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(rng=rng)
        self.rasterizer = rasterizer
        self.icon_fetcher = icon_fetcher

    @property
    def can_rasterize(self) -> bool:
        return True

    async def compose(self, pair: Pair, address: str) -> PreviewImageArtifact:
        svg = self.build_svg(pair)
        try:
            png = await asyncio.to_thread(self.rasterizer.rasterize, svg, WIDTH, HEIGHT)
        except Exception as e:
            log.error(f"[OG] Rasterizer error, serving SVG: {e}")
            return self._vector_artifact(svg, address)

        png = await self._overlay_icon(png, pair, address)
        PREVIEW_RENDERS.labels(media_type=PNG_MEDIA_TYPE).inc()
        return PreviewImageArtifact(content=png, media_type=PNG_MEDIA_TYPE, address=address)

    async def _overlay_icon(self, png: bytes, pair: Pair, address: str) -> bytes:
        if self.icon_fetcher is None:
            return png
        try:
            url = self.icon_fetcher.icon_url(pair, address)
            icon = await self.icon_fetcher.fetch(url)
            composed = await asyncio.to_thread(overlay_circular_icon, png, icon)
        except IconFetchError as e:
            ICON_OVERLAYS.labels(outcome="failed").inc()
            log.info(f"[OG] Icon overlay skipped for {address[:8]}...: {e}")
            return png
        ICON_OVERLAYS.labels(outcome="ok").inc()
        return composed


def build_image_composer(
    rasterizer: Optional[SvgRasterizer],
    icon_fetcher: Optional[IconFetcher] = None,
    rng: Optional[random.Random] = None,
) -> VectorImageComposer:
    if rasterizer is None:
        return VectorImageComposer(rng=rng)
    return RasterImageComposer(rasterizer=rasterizer, icon_fetcher=icon_fetcher, rng=rng)
