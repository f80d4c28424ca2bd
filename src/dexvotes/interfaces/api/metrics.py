import time

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Request, Response

router = APIRouter(prefix="/metrics", tags=["metrics"])

REQUESTS = Counter("dv_requests_total", "Total HTTP requests")
LATENCY = Histogram("dv_request_latency_seconds", "Request latency")

async def track_requests(request: Request, call_next):
    REQUESTS.inc()
    started = time.perf_counter()
    try:
        return await call_next(request)
    finally:
        LATENCY.observe(time.perf_counter() - started)

@router.get("")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
