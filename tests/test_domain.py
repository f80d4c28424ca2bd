from dexvotes.domain.entities import MarketDataDocument, Pair, PreviewImageArtifact, PNG_MEDIA_TYPE

from conftest import make_pair, make_payload


def test_pair_from_payload_reads_nested_fields():
    pair = Pair.from_payload(make_pair(info={"imageUrl": "https://cdn.example/icon.png"}))
    assert pair.base_token.name == "Bonk"
    assert pair.base_token.symbol == "BONK"
    assert pair.chain_id == "solana"
    assert pair.quote_symbol == "SOL"
    assert pair.price_usd == 0.00002345
    assert pair.liquidity_usd == 1000.0
    assert pair.volume_h24 == 1_250_000
    assert pair.price_change_h24 == 4.2
    assert pair.image_url == "https://cdn.example/icon.png"


def test_pair_missing_and_null_numbers_default_to_zero():
    pair = Pair.from_payload({
        "baseToken": {"name": "Ghost"},
        "priceUsd": None,
        "liquidity": None,
        "volume": {"h24": "n/a"},
        "fdv": None,
    })
    assert pair.price_usd == 0.0
    assert pair.liquidity_usd == 0.0
    assert pair.volume_h24 == 0.0
    assert pair.fdv == 0.0
    assert pair.market_cap == 0.0
    assert pair.image_url is None


def test_pair_display_fallbacks():
    pair = Pair.from_payload({"baseToken": {"symbol": "XYZ"}, "marketCap": 500})
    assert pair.display_name == "XYZ"
    assert pair.display_symbol == "XYZ"
    assert pair.display_market_cap == 500

    anonymous = Pair.from_payload({})
    assert anonymous.display_name == "Unknown"
    assert anonymous.display_symbol == "???"


def test_display_market_cap_prefers_fdv():
    pair = Pair.from_payload(make_pair())
    assert pair.display_market_cap == 1_500_000_000


def test_document_keeps_order_and_raw_payload():
    payload = make_payload([make_pair(symbol="A"), make_pair(symbol="B")])
    doc = MarketDataDocument.from_payload(payload)
    assert [p.base_token.symbol for p in doc.pairs] == ["A", "B"]
    assert doc.raw is payload


def test_document_with_null_pairs_is_empty():
    assert MarketDataDocument.from_payload({"pairs": None}).pairs == ()
    assert MarketDataDocument.from_payload([]).pairs == ()


def test_artifact_is_raster():
    assert PreviewImageArtifact(b"x", PNG_MEDIA_TYPE, "addr").is_raster
