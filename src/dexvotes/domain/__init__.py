# src/dexvotes/domain/__init__.py
"""
Domain layer: market-data value types, preview artifacts and the error taxonomy.
"""

from .entities import (
    PNG_MEDIA_TYPE,
    SVG_MEDIA_TYPE,
    TokenDescriptor,
    Pair,
    MarketDataDocument,
    TrendingDocument,
    PreviewImageArtifact,
    VoteTally,
    RenderContext,
)
from .errors import (
    DexVotesError,
    UpstreamError,
    NotFoundError,
    InvalidAddressError,
    CapabilityUnavailableError,
    IconFetchError,
)

__all__ = [
    "PNG_MEDIA_TYPE",
    "SVG_MEDIA_TYPE",
    "TokenDescriptor",
    "Pair",
    "MarketDataDocument",
    "TrendingDocument",
    "PreviewImageArtifact",
    "VoteTally",
    "RenderContext",
    "DexVotesError",
    "UpstreamError",
    "NotFoundError",
    "InvalidAddressError",
    "CapabilityUnavailableError",
    "IconFetchError",
]
