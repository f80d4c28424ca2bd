# File: src/dexvotes/interfaces/api/routers/pages.py
# Catch-all HTML route. Must be registered after every other router.

import re

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from dexvotes.application.services.page_renderer import PageRenderer
from dexvotes.interfaces.api.deps import get_page_renderer, request_host, request_scheme

router = APIRouter(tags=["Pages"])

STATIC_FILE_RE = re.compile(r"\.(js|css|png|jpg|jpeg|svg|ico|json)$", re.IGNORECASE)


@router.get("/{full_path:path}", response_class=HTMLResponse)
async def render_page(request: Request, full_path: str = "", renderer: PageRenderer = Depends(get_page_renderer)):
    if STATIC_FILE_RE.search(full_path.rstrip("/")):
        return PlainTextResponse("Not found", status_code=404)
    html = await renderer.render(
        request_path="/" + full_path,
        query_params=request.query_params,
        host=request_host(request),
        scheme=request_scheme(request),
    )
    return HTMLResponse(html)
