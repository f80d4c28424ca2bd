#--- src/dexvotes/application/services/preview_image_service.py ---
import logging
import re

from dexvotes.application.services.image_composer import VectorImageComposer
from dexvotes.application.services.pair_selector import select_best_pair
from dexvotes.application.services.token_data_service import TokenDataService
from dexvotes.domain.entities import PreviewImageArtifact
from dexvotes.domain.errors import CapabilityUnavailableError, InvalidAddressError, NotFoundError
from dexvotes.infrastructure.cache import InMemoryCache
from dexvotes.infrastructure.monitoring.metrics import CACHE_LOOKUPS

log = logging.getLogger(__name__)

MIN_ADDRESS_LENGTH = 10
MAX_ADDRESS_LENGTH = 256
# Path separators, extension dots, whitespace and control characters.
_FORBIDDEN_ADDRESS_CHARS = re.compile(r"[/.\s\x00-\x1f\x7f]")


class PreviewImageService:
    """
    Serves preview images for an address from the artifact store, composing
    (and storing) a new one on a miss. A hit never touches the composer or
    the network.
    """

    def __init__(self, token_data: TokenDataService, composer: VectorImageComposer, store: InMemoryCache):
        self.token_data = token_data
        self.composer = composer
        self.store = store

    @property
    def can_rasterize(self) -> bool:
        return self.composer.can_rasterize

    @staticmethod
    def validate_address(address: str) -> str:
        address = (address or "").strip()
        if (
            not MIN_ADDRESS_LENGTH <= len(address) <= MAX_ADDRESS_LENGTH
            or _FORBIDDEN_ADDRESS_CHARS.search(address)
        ):
            raise InvalidAddressError("Invalid token address")
        return address

    async def get_or_generate(self, address: str, require_raster: bool = False) -> PreviewImageArtifact:
        address = self.validate_address(address)
        if require_raster and not self.can_rasterize:
            raise CapabilityUnavailableError("PNG rendering is not available on this server")

        key = TokenDataService.normalize_address(address)
        entry = self.store.get(key)
        if entry is not None:
            CACHE_LOOKUPS.labels(cache="preview_image", result="hit").inc()
            return entry.value
        CACHE_LOOKUPS.labels(cache="preview_image", result="miss").inc()

        log.info(f"[OG] Generating for: {address[:8]}...")
        doc = await self.token_data.get(address)
        pair = select_best_pair(doc)
        if pair is None:
            raise NotFoundError("Token not found")

        artifact = await self.composer.compose(pair, address)
        self.store.set(key, artifact)
        return artifact

    async def generate_vector(self, address: str) -> PreviewImageArtifact:
        """Always-SVG variant. Not stored: the store holds the primary artifact per address."""
        address = self.validate_address(address)
        doc = await self.token_data.get(address)
        pair = select_best_pair(doc)
        if pair is None:
            raise NotFoundError("Token not found")
        return await self.composer.compose_vector(pair, address)

    def fallback(self) -> PreviewImageArtifact:
        return self.composer.compose_fallback()
