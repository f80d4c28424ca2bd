# File: src/dexvotes/interfaces/api/routers/og.py
# Preview image endpoints used as og:image / twitter:image.

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from dexvotes.application.services.preview_image_service import PreviewImageService
from dexvotes.config import Settings
from dexvotes.domain.entities import PreviewImageArtifact
from dexvotes.domain.errors import (
    CapabilityUnavailableError,
    InvalidAddressError,
    NotFoundError,
    UpstreamError,
)
from dexvotes.interfaces.api.deps import get_preview_image_service, get_settings

log = logging.getLogger(__name__)
router = APIRouter(tags=["Preview"])

CACHE_CONTROL = "public, max-age=300, s-maxage=300"
FALLBACK_CACHE_CONTROL = "public, max-age=60"


def _image_response(artifact: PreviewImageArtifact, cache_control: str = CACHE_CONTROL) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Cache-Control": cache_control},
    )


async def _serve(address: str, previews: PreviewImageService, require_raster: bool, vector_only: bool = False) -> Response:
    try:
        if vector_only:
            artifact = await previews.generate_vector(address)
        else:
            artifact = await previews.get_or_generate(address, require_raster=require_raster)
    except InvalidAddressError as e:
        return PlainTextResponse(str(e), status_code=400)
    except NotFoundError as e:
        return PlainTextResponse(str(e), status_code=404)
    except CapabilityUnavailableError as e:
        return PlainTextResponse(str(e), status_code=501)
    except UpstreamError as e:
        log.error(f"[OG] Upstream error for {address[:8]}...: {e}")
        return _image_response(previews.fallback(), FALLBACK_CACHE_CONTROL)
    except Exception as e:
        log.exception(f"[OG] Error: {e}")
        return PlainTextResponse("Image generation failed", status_code=500)
    return _image_response(artifact)


@router.get("/og/{address}.png")
async def og_png(
    address: str,
    previews: PreviewImageService = Depends(get_preview_image_service),
    cfg: Settings = Depends(get_settings),
):
    return await _serve(address, previews, require_raster=not cfg.OG_ALLOW_SVG_FALLBACK)


@router.get("/og/{address}.svg")
async def og_svg(address: str, previews: PreviewImageService = Depends(get_preview_image_service)):
    return await _serve(address, previews, require_raster=False, vector_only=True)


@router.get("/api/og")
async def og_query(
    request: Request,
    previews: PreviewImageService = Depends(get_preview_image_service),
    cfg: Settings = Depends(get_settings),
):
    address = request.query_params.get("ca") or ""
    return await _serve(address, previews, require_raster=not cfg.OG_ALLOW_SVG_FALLBACK)
