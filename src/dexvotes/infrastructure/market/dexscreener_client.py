#--- src/dexvotes/infrastructure/market/dexscreener_client.py ---
# Thin async client for the DexScreener public API.
# No retries: a failed request raises UpstreamError and the caller decides.

import logging
import time
from typing import Any, Optional
from urllib.parse import quote

import httpx

from dexvotes.domain.entities import MarketDataDocument, TrendingDocument
from dexvotes.domain.errors import UpstreamError
from dexvotes.infrastructure.monitoring.metrics import UPSTREAM_LATENCY, UPSTREAM_REQUESTS

log = logging.getLogger(__name__)

BASE_HEADERS = {
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
}


class DexScreenerClient:
    """
    Fetches token pairs and the trending (boosted) token list.

    Request policy is configurable: `send_user_agent` toggles the browser-like
    User-Agent header and `force_ipv4` binds the transport to 0.0.0.0 so the
    connection never goes out over IPv6.
    """
    TOKENS_PATH = "/latest/dex/tokens/{address}"
    TRENDING_PATH = "/token-boosts/top/v1"

    def __init__(
        self,
        base_url: str = "https://api.dexscreener.com",
        timeout: float = 8.0,
        send_user_agent: bool = True,
        user_agent: Optional[str] = None,
        force_ipv4: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        headers = dict(BASE_HEADERS)
        if send_user_agent and user_agent:
            headers["User-Agent"] = user_agent
        if transport is None and force_ipv4:
            transport = httpx.AsyncHTTPTransport(local_address="0.0.0.0")
        self.http_client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)
        if not send_user_agent:
            # httpx adds its own default User-Agent; the policy is to send none.
            self.http_client.headers.pop("User-Agent", None)

    async def _get_json(self, endpoint: str, url: str) -> Any:
        started = time.perf_counter()
        try:
            response = await self.http_client.get(url)
        except httpx.TimeoutException as e:
            UPSTREAM_REQUESTS.labels(endpoint=endpoint, outcome="timeout").inc()
            raise UpstreamError(f"Upstream timeout after {self.timeout}s", cause=e) from e
        except httpx.HTTPError as e:
            UPSTREAM_REQUESTS.labels(endpoint=endpoint, outcome="transport_error").inc()
            raise UpstreamError(f"Upstream request failed: {e}", cause=e) from e
        finally:
            UPSTREAM_LATENCY.labels(endpoint=endpoint).observe(time.perf_counter() - started)

        if not response.is_success:
            UPSTREAM_REQUESTS.labels(endpoint=endpoint, outcome="http_error").inc()
            raise UpstreamError(f"API Error: Status {response.status_code}", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            UPSTREAM_REQUESTS.labels(endpoint=endpoint, outcome="parse_error").inc()
            raise UpstreamError(f"Upstream returned invalid JSON: {e}", status_code=response.status_code, cause=e) from e

        UPSTREAM_REQUESTS.labels(endpoint=endpoint, outcome="ok").inc()
        return data

    async def fetch_market_data(self, address: str) -> MarketDataDocument:
        url = self.base_url + self.TOKENS_PATH.format(address=quote(address, safe=""))
        log.debug(f"Fetching market data for {address[:8]}...")
        data = await self._get_json("tokens", url)
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected market data payload type: {type(data).__name__}")
        return MarketDataDocument.from_payload(data)

    async def fetch_trending(self) -> TrendingDocument:
        data = await self._get_json("trending", self.base_url + self.TRENDING_PATH)
        return TrendingDocument(raw=data)

    async def aclose(self) -> None:
        await self.http_client.aclose()


def build_dexscreener_client(settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> DexScreenerClient:
    return DexScreenerClient(
        base_url=settings.DEXSCREENER_BASE_URL,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        send_user_agent=settings.UPSTREAM_SEND_USER_AGENT,
        user_agent=settings.UPSTREAM_USER_AGENT,
        force_ipv4=settings.UPSTREAM_FORCE_IPV4,
        transport=transport,
    )

