# src/dexvotes/infrastructure/monitoring/metrics.py
from prometheus_client import Counter, Histogram

UPSTREAM_REQUESTS = Counter(
    "dv_upstream_requests_total", "Upstream market-data requests", ["endpoint", "outcome"]
)
UPSTREAM_LATENCY = Histogram("dv_upstream_latency_seconds", "Upstream market-data latency", ["endpoint"])
CACHE_LOOKUPS = Counter("dv_cache_lookups_total", "Cache lookups", ["cache", "result"])
PREVIEW_RENDERS = Counter("dv_preview_renders_total", "Preview images composed", ["media_type"])
ICON_OVERLAYS = Counter("dv_icon_overlays_total", "Icon overlay attempts", ["outcome"])
