# src/dexvotes/interfaces/api/deps.py

from fastapi import HTTPException, Request

from dexvotes.config import Settings
from dexvotes.application.services.token_data_service import TokenDataService
from dexvotes.application.services.preview_image_service import PreviewImageService
from dexvotes.application.services.page_renderer import PageRenderer


def _service(request: Request, name: str):
    services = request.app.state.services or {}
    service = services.get(name)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{name} is currently unavailable.")
    return service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_data_service(request: Request) -> TokenDataService:
    """Dependency to get the TokenDataService instance from the app state."""
    return _service(request, "token_data_service")


def get_preview_image_service(request: Request) -> PreviewImageService:
    return _service(request, "preview_image_service")


def get_page_renderer(request: Request) -> PageRenderer:
    return _service(request, "page_renderer")


def request_scheme(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-proto")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.url.scheme or "https"


def request_host(request: Request) -> str:
    return request.headers.get("host") or request.url.netloc
