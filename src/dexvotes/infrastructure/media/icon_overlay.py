# src/dexvotes/infrastructure/media/icon_overlay.py
"""
Best-effort token icon: download, crop to a circle, paste onto the preview.

Every failure (timeout, non-200, undecodable bytes) is raised as
IconFetchError so the composer has exactly one thing to swallow.
"""

import logging
from io import BytesIO
from typing import Optional, Tuple

import httpx
from PIL import Image, ImageChops, ImageDraw, UnidentifiedImageError

from dexvotes.domain.entities import Pair
from dexvotes.domain.errors import IconFetchError

log = logging.getLogger(__name__)

ICON_SIZE = 100
ICON_RADIUS = 48
# Top-left corner that centres the icon on the identity circle at (130, 220).
ICON_OFFSET = (80, 170)


class IconFetcher:

    def __init__(
        self,
        url_template: str = "https://dd.dexscreener.com/ds-data/tokens/{chain}/{address}.png",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url_template = url_template
        self.http_client = httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport)

    def icon_url(self, pair: Pair, address: str) -> str:
        if pair.image_url:
            return pair.image_url
        try:
            return self.url_template.format(chain=pair.chain_id or "unknown", address=address)
        except (KeyError, IndexError, ValueError) as e:
            raise IconFetchError(f"Bad icon URL template: {e!r}") from e

    async def fetch(self, url: str) -> bytes:
        try:
            response = await self.http_client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise IconFetchError(f"Icon request failed: {e}") from e
        if response.status_code != 200:
            raise IconFetchError(f"Icon request returned {response.status_code}")
        return response.content

    async def aclose(self) -> None:
        await self.http_client.aclose()


def circular_mask(size: int = ICON_SIZE, radius: int = ICON_RADIUS) -> Image.Image:
    mask = Image.new("L", (size, size), 0)
    c = size / 2
    ImageDraw.Draw(mask).ellipse((c - radius, c - radius, c + radius, c + radius), fill=255)
    return mask


def overlay_circular_icon(
    base_png: bytes,
    icon_bytes: bytes,
    size: int = ICON_SIZE,
    radius: int = ICON_RADIUS,
    offset: Tuple[int, int] = ICON_OFFSET,
) -> bytes:
    try:
        with Image.open(BytesIO(base_png)) as base_img, Image.open(BytesIO(icon_bytes)) as icon_img:
            base = base_img.convert("RGBA")
            icon = icon_img.convert("RGBA").resize((size, size), Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise IconFetchError(f"Icon could not be decoded: {e}") from e

    # dest-in: keep the icon's own transparency, clipped to the circle
    icon.putalpha(ImageChops.multiply(icon.getchannel("A"), circular_mask(size, radius)))
    base.alpha_composite(icon, dest=offset)

    out = BytesIO()
    base.save(out, format="PNG")
    return out.getvalue()
