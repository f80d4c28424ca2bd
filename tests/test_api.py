# --- START OF FILE: tests/test_api.py ---
import random
from pathlib import Path
from urllib.parse import quote

import httpx
import pytest
from fastapi.testclient import TestClient

from dexvotes.boot import build_services
from dexvotes.interfaces.api.main import create_app

from conftest import FakeRasterizer, make_pair, make_payload, png_bytes

ADDRESS = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
EMPTY_ADDRESS = "EmptyPairs0000000000"
BROKEN_ADDRESS = "Broken00000000000000"
SUI_ADDRESS = "0x76cb819b01abed502bee8a702b4c2d547532c12f25001c9dea795a5e631c26f1::fud::FUD"
TRENDING = [{"tokenAddress": ADDRESS, "chainId": "solana", "totalAmount": 500}]


def _market_transport(calls: list) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        path = request.url.path
        if path == "/token-boosts/top/v1":
            return httpx.Response(200, json=TRENDING)
        if path.endswith(ADDRESS):
            return httpx.Response(200, json=make_payload([make_pair(liquidity=10.0), make_pair(name="Big", liquidity=9e6)]))
        if path.endswith(SUI_ADDRESS):
            return httpx.Response(200, json=make_payload([make_pair(name="Fud", symbol="FUD", chain="sui")]))
        if path.endswith(EMPTY_ADDRESS):
            return httpx.Response(200, json={"schemaVersion": "1.0.0", "pairs": None})
        return httpx.Response(500, json={"message": "boom"})
    return httpx.MockTransport(handler)


def _icon_transport() -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(200, content=png_bytes()))


def _client(cfg, calls: list, rasterizer=None):
    app = create_app(cfg)
    app.state.services = build_services(
        cfg,
        market_transport=_market_transport(calls),
        icon_transport=_icon_transport(),
        rasterizer=rasterizer,
        rng=random.Random(7),
    )
    return TestClient(app)


@pytest.fixture
def calls() -> list:
    return []


@pytest.fixture
def client(test_settings, calls):
    with _client(test_settings, calls) as c:
        yield c


@pytest.fixture
def raster_client(test_settings, calls):
    with _client(test_settings, calls, rasterizer=FakeRasterizer()) as c:
        yield c


@pytest.fixture
def strict_client(test_settings, calls):
    cfg = test_settings.model_copy(update={"OG_ALLOW_SVG_FALLBACK": False})
    with _client(cfg, calls) as c:
        yield c


def test_health(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_token_proxy_returns_upstream_document_and_caches_it(client: TestClient, calls: list):
    first = client.get(f"/api/token/{ADDRESS}")
    second = client.get(f"/api/token/{ADDRESS.lower()}")

    assert first.status_code == 200
    assert first.json()["schemaVersion"] == "1.0.0"
    assert len(first.json()["pairs"]) == 2
    assert second.json() == first.json()
    assert len(calls) == 1


def test_token_proxy_upstream_failure_is_502(client: TestClient):
    r = client.get(f"/api/token/{BROKEN_ADDRESS}")
    assert r.status_code == 502
    assert "error" in r.json()


def test_trending_passes_list_through(client: TestClient):
    r = client.get("/api/trending")
    assert r.status_code == 200
    assert r.json() == TRENDING


def test_png_route_degrades_to_svg_without_rasterizer(client: TestClient):
    r = client.get(f"/og/{ADDRESS}.png")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("image/svg+xml")
    assert r.headers["cache-control"] == "public, max-age=300, s-maxage=300"
    # Best pair by liquidity wins.
    assert "Big" in r.text


def test_png_route_renders_png_with_rasterizer(raster_client: TestClient, calls: list):
    r = raster_client.get(f"/og/{ADDRESS}.png")
    again = raster_client.get(f"/og/{ADDRESS}.png")

    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    assert r.content.startswith(b"\x89PNG")
    assert again.content == r.content
    assert len(calls) == 1


def test_svg_route_is_always_vector(raster_client: TestClient):
    r = raster_client.get(f"/og/{ADDRESS}.svg")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("image/svg+xml")
    assert r.text.startswith("<svg")


def test_query_image_route(client: TestClient):
    r = client.get("/api/og", params={"ca": ADDRESS})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("image/svg+xml")


def test_invalid_address_is_400(client: TestClient, calls: list):
    assert client.get("/og/bad.png").status_code == 400
    assert client.get("/api/og").status_code == 400
    assert calls == []


def test_token_without_pairs_is_404(client: TestClient):
    r = client.get(f"/og/{EMPTY_ADDRESS}.png")
    assert r.status_code == 404
    assert r.text == "Token not found"


def test_upstream_failure_serves_fallback_image(client: TestClient):
    r = client.get(f"/og/{BROKEN_ADDRESS}.png")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("image/svg+xml")
    assert r.headers["cache-control"] == "public, max-age=60"
    assert "DEXSCREENER" in r.text


def test_strict_png_without_rasterizer_is_501(strict_client: TestClient, calls: list):
    r = strict_client.get(f"/og/{ADDRESS}.png")
    assert r.status_code == 501
    assert calls == []


def test_static_extensions_are_not_rendered_as_pages(client: TestClient):
    r = client.get("/missing/file.js")
    assert r.status_code == 404
    assert r.text == "Not found"


def test_static_assets_are_served(client: TestClient):
    assert client.get("/static/style.css").status_code == 200


def test_root_page_uses_default_copy(client: TestClient, calls: list):
    r = client.get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "DexScreener Votes" in r.text
    assert "{{UNKNOWN_TOKEN}}" in r.text
    assert calls == []


def test_token_page_injects_meta(client: TestClient):
    r = client.get(f"/{ADDRESS}", headers={"x-forwarded-proto": "https"})
    assert r.status_code == 200
    assert "Big (BONK) — Vote to Earn SOL" in r.text
    assert f'og:image" content="https://testserver/og/{ADDRESS}.png"' in r.text
    assert f'token-address" content="{ADDRESS}"' in r.text


def test_token_page_survives_upstream_failure(client: TestClient):
    r = client.get(f"/{BROKEN_ADDRESS}")
    assert r.status_code == 200
    assert "DexScreener Votes" in r.text


def test_metrics_endpoint(client: TestClient):
    client.get("/health")
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "dv_requests_total" in r.text


def test_coin_type_address_page_links_to_a_working_image(client: TestClient):
    page = client.get(f"/{SUI_ADDRESS}", headers={"x-forwarded-proto": "https"})
    assert page.status_code == 200
    assert "Fud (FUD) — Vote to Earn SUI" in page.text
    image_path = f"/og/{quote(SUI_ADDRESS, safe='')}.png"
    assert f'og:image" content="https://testserver{image_path}"' in page.text

    image = client.get(image_path)
    assert image.status_code == 200
    assert image.headers["content-type"].startswith("image/svg+xml")
    assert "FUD" in image.text


def test_coin_type_address_on_disk_backend(test_settings, calls):
    cfg = test_settings.model_copy(update={"IMAGE_CACHE_BACKEND": "disk"})
    with _client(cfg, calls) as c:
        first = c.get(f"/og/{SUI_ADDRESS}.png")
        second = c.get(f"/og/{SUI_ADDRESS}.png")
    assert first.status_code == 200
    assert second.content == first.content
    assert len(calls) == 1
    assert len(list(Path(cfg.IMAGE_CACHE_DIR).glob("*.svg"))) == 1
