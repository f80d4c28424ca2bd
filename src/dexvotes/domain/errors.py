# src/dexvotes/domain/errors.py
"""
Error taxonomy shared by the services and the HTTP layer.

Routers map these to status codes: UpstreamError -> 502 on the API proxy,
InvalidAddressError -> 400, NotFoundError -> 404 and
CapabilityUnavailableError -> 501 on the image route. IconFetchError never
leaves the image composer.
"""

from typing import Optional


class DexVotesError(Exception):
    pass


class UpstreamError(DexVotesError):
    """Market-data fetch failed: non-2xx status, transport error or unparseable body."""

    def __init__(self, message: str, status_code: Optional[int] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause


class NotFoundError(DexVotesError):
    """The upstream document has no pairs for the address."""


class InvalidAddressError(DexVotesError):
    pass


class CapabilityUnavailableError(DexVotesError):
    """A raster image was required but no rasterizer is configured."""


class IconFetchError(DexVotesError):
    """Best-effort icon download/decode failed."""
