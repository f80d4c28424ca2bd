import pytest
from unittest.mock import AsyncMock, MagicMock

from dexvotes.application.services.token_data_service import TokenDataService
from dexvotes.domain.entities import MarketDataDocument, TrendingDocument
from dexvotes.domain.errors import UpstreamError
from dexvotes.infrastructure.cache import InMemoryCache

from conftest import make_pair, make_payload

ADDRESS = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


@pytest.fixture
def document() -> MarketDataDocument:
    return MarketDataDocument.from_payload(make_payload([make_pair()]))


@pytest.fixture
def mock_client(document) -> MagicMock:
    client = MagicMock()
    client.fetch_market_data = AsyncMock(return_value=document)
    client.fetch_trending = AsyncMock(return_value=TrendingDocument(raw=[]))
    return client


@pytest.fixture
def service(mock_client, clock) -> TokenDataService:
    return TokenDataService(client=mock_client, cache=InMemoryCache(ttl_seconds=300, clock=clock))


@pytest.mark.asyncio
async def test_hit_within_ttl_does_not_call_upstream(service, mock_client, clock, document):
    first = await service.get(ADDRESS)
    clock.advance(120)
    second = await service.get(ADDRESS)

    assert first is document
    assert second is document
    mock_client.fetch_market_data.assert_awaited_once_with(ADDRESS)


@pytest.mark.asyncio
async def test_key_is_case_insensitive(service, mock_client):
    await service.get(ADDRESS)
    await service.get(ADDRESS.lower())
    await service.get("  " + ADDRESS.upper() + " ")
    assert mock_client.fetch_market_data.await_count == 1


@pytest.mark.asyncio
async def test_miss_after_ttl_refetches_and_overwrites_timestamp(service, mock_client, clock):
    await service.get(ADDRESS)
    first_ts = service.cache.peek(ADDRESS.lower()).fetched_at_ms

    clock.advance(300)
    await service.get(ADDRESS)

    assert mock_client.fetch_market_data.await_count == 2
    assert service.cache.peek(ADDRESS.lower()).fetched_at_ms == first_ts + 300_000


@pytest.mark.asyncio
async def test_upstream_failure_propagates_and_is_not_cached(service, mock_client):
    mock_client.fetch_market_data.side_effect = UpstreamError("API Error: Status 500", status_code=500)
    with pytest.raises(UpstreamError):
        await service.get(ADDRESS)
    assert service.cache.peek(ADDRESS.lower()) is None


@pytest.mark.asyncio
async def test_stale_entry_is_not_served_when_refetch_fails(service, mock_client, clock):
    await service.get(ADDRESS)
    clock.advance(301)
    mock_client.fetch_market_data.side_effect = UpstreamError("timeout")

    with pytest.raises(UpstreamError):
        await service.get(ADDRESS)


@pytest.mark.asyncio
async def test_empty_documents_are_cached_too(service, mock_client):
    mock_client.fetch_market_data.return_value = MarketDataDocument.from_payload({"pairs": None})
    await service.get(ADDRESS)
    await service.get(ADDRESS)
    assert mock_client.fetch_market_data.await_count == 1


@pytest.mark.asyncio
async def test_trending_is_passed_through(service, mock_client):
    trending = await service.get_trending()
    assert trending.raw == []
    mock_client.fetch_trending.assert_awaited_once()
