#--- src/dexvotes/application/services/token_data_service.py ---
"""
Token data with a short-lived cache in front of the upstream client.

A fresh entry (age < TTL) is returned without touching the network. A miss
or a stale entry goes to the upstream and overwrites the slot. If that fetch
fails the error propagates and nothing is cached; a stale entry is
deliberately NOT served as a fallback.
"""
import logging

from dexvotes.domain.entities import MarketDataDocument, TrendingDocument
from dexvotes.infrastructure.cache import InMemoryCache
from dexvotes.infrastructure.market.dexscreener_client import DexScreenerClient
from dexvotes.infrastructure.monitoring.metrics import CACHE_LOOKUPS

log = logging.getLogger(__name__)


class TokenDataService:

    def __init__(self, client: DexScreenerClient, cache: InMemoryCache):
        self.client = client
        self.cache = cache

    @staticmethod
    def normalize_address(address: str) -> str:
        return (address or "").strip().lower()

    async def get(self, address: str) -> MarketDataDocument:
        key = self.normalize_address(address)
        entry = self.cache.get(key)
        if entry is not None:
            CACHE_LOOKUPS.labels(cache="token_data", result="hit").inc()
            return entry.value

        CACHE_LOOKUPS.labels(cache="token_data", result="miss").inc()
        doc = await self.client.fetch_market_data(address.strip())
        self.cache.set(key, doc)
        log.debug(f"Cached market data for {key[:8]}... ({len(doc.pairs)} pairs)")
        return doc

    async def get_trending(self) -> TrendingDocument:
        return await self.client.fetch_trending()
