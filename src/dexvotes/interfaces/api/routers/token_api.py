# File: src/dexvotes/interfaces/api/routers/token_api.py
# JSON proxy for the browser: the upstream API is not CORS-friendly.

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dexvotes.application.services.token_data_service import TokenDataService
from dexvotes.domain.errors import UpstreamError
from dexvotes.interfaces.api.deps import get_token_data_service

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Token"])


@router.get("/token/{address}")
async def get_token(address: str, token_data: TokenDataService = Depends(get_token_data_service)):
    try:
        doc = await token_data.get(address)
    except UpstreamError as e:
        log.error(f"API /token Error: {e}")
        return JSONResponse(status_code=502, content={"error": str(e)})
    return doc.raw


@router.get("/trending")
async def get_trending(token_data: TokenDataService = Depends(get_token_data_service)):
    try:
        trending = await token_data.get_trending()
    except UpstreamError as e:
        log.error(f"API /trending Error: {e}")
        return JSONResponse(status_code=502, content={"error": str(e)})
    return JSONResponse(content=trending.raw)
