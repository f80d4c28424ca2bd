# src/dexvotes/infrastructure/media/rasterizer.py
"""
SVG -> PNG conversion. cairosvg needs the native cairo library, which not every
host ships; the capability is detected once at startup and the composer is
built with or without a rasterizer accordingly.
"""

import logging
from typing import Optional, Protocol

log = logging.getLogger(__name__)


class SvgRasterizer(Protocol):
    def rasterize(self, svg: str, width: int, height: int) -> bytes:
        ...


class CairoSvgRasterizer:
    def __init__(self):
        import cairosvg
        self._svg2png = cairosvg.svg2png

    def rasterize(self, svg: str, width: int, height: int) -> bytes:
        return self._svg2png(bytestring=svg.encode("utf-8"), output_width=width, output_height=height)


def detect_rasterizer(enabled: bool = True) -> Optional[SvgRasterizer]:
    if not enabled:
        log.info("Rasterization disabled by configuration; previews will be served as SVG.")
        return None
    try:
        rasterizer = CairoSvgRasterizer()
    except (ImportError, OSError) as e:
        log.warning(f"cairosvg not available ({e}); previews will be served as SVG.")
        return None
    log.info("cairosvg rasterizer available.")
    return rasterizer
