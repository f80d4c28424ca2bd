# src/dexvotes/domain/entities.py
"""
Core value types: market data as returned by the upstream API, the preview
artifact produced by the image pipeline and the per-request render context.

Upstream numbers arrive as floats, numeric strings, null or not at all. Every
numeric field is coerced to a float and defaults to 0.0 so formatting never
has to guard against missing data.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

PNG_MEDIA_TYPE = "image/png"
SVG_MEDIA_TYPE = "image/svg+xml"


def _to_float(v: Any) -> float:
    if v is None or isinstance(v, bool):
        return 0.0
    try:
        value = float(v)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def _to_str(v: Any) -> str:
    if v is None:
        return ""
    return str(v)


def _section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


# --- MARKET DATA ---

@dataclass(frozen=True)
class TokenDescriptor:
    address: str = ""
    name: str = ""
    symbol: str = ""

    @classmethod
    def from_payload(cls, payload: Any) -> "TokenDescriptor":
        if not isinstance(payload, dict):
            return cls()
        return cls(
            address=_to_str(payload.get("address")),
            name=_to_str(payload.get("name")),
            symbol=_to_str(payload.get("symbol")),
        )


@dataclass(frozen=True)
class Pair:
    """One trading venue's view of a token."""
    base_token: TokenDescriptor
    chain_id: str = ""
    dex_id: str = ""
    pair_address: str = ""
    url: str = ""
    quote_symbol: str = ""
    price_usd: float = 0.0
    liquidity_usd: float = 0.0
    volume_h24: float = 0.0
    fdv: float = 0.0
    market_cap: float = 0.0
    price_change_h24: float = 0.0
    image_url: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Pair":
        info = _section(payload, "info")
        return cls(
            base_token=TokenDescriptor.from_payload(payload.get("baseToken")),
            chain_id=_to_str(payload.get("chainId")),
            dex_id=_to_str(payload.get("dexId")),
            pair_address=_to_str(payload.get("pairAddress")),
            url=_to_str(payload.get("url")),
            quote_symbol=_to_str(_section(payload, "quoteToken").get("symbol")),
            price_usd=_to_float(payload.get("priceUsd")),
            liquidity_usd=_to_float(_section(payload, "liquidity").get("usd")),
            volume_h24=_to_float(_section(payload, "volume").get("h24")),
            fdv=_to_float(payload.get("fdv")),
            market_cap=_to_float(payload.get("marketCap")),
            price_change_h24=_to_float(_section(payload, "priceChange").get("h24")),
            image_url=info.get("imageUrl") or None,
        )

    @property
    def display_market_cap(self) -> float:
        """FDV when known, market cap otherwise (what the preview calls MARKET CAP)."""
        return self.fdv or self.market_cap

    @property
    def display_name(self) -> str:
        return self.base_token.name or self.base_token.symbol or "Unknown"

    @property
    def display_symbol(self) -> str:
        return self.base_token.symbol or "???"


@dataclass(frozen=True)
class MarketDataDocument:
    """Upstream response for one address. `raw` is proxied verbatim by the API."""
    pairs: Tuple[Pair, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_payload(cls, payload: Any) -> "MarketDataDocument":
        if not isinstance(payload, dict):
            return cls(pairs=(), raw={})
        items = payload.get("pairs") or []
        pairs = tuple(Pair.from_payload(p) for p in items if isinstance(p, dict))
        return cls(pairs=pairs, raw=payload)


@dataclass(frozen=True)
class TrendingDocument:
    raw: Any = None


# --- PREVIEW IMAGES ---

@dataclass(frozen=True)
class PreviewImageArtifact:
    content: bytes
    media_type: str
    address: str

    @property
    def is_raster(self) -> bool:
        return self.media_type == PNG_MEDIA_TYPE


@dataclass(frozen=True)
class VoteTally:
    count: int
    total: int
    percent: int


# --- PAGE RENDERING ---

@dataclass
class RenderContext:
    """Per-request state of the page renderer. Never shared between requests."""
    address: Optional[str] = None
    pair: Optional[Pair] = None
    display: Dict[str, str] = field(default_factory=dict)
    values: Dict[str, str] = field(default_factory=dict)
