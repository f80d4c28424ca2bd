# src/dexvotes/application/services/__init__.py

from .token_data_service import TokenDataService
from .pair_selector import select_best_pair
from .image_composer import VectorImageComposer, RasterImageComposer, build_image_composer
from .preview_image_service import PreviewImageService
from .page_renderer import PageRenderer

__all__ = [
    "TokenDataService",
    "select_best_pair",
    "VectorImageComposer",
    "RasterImageComposer",
    "build_image_composer",
    "PreviewImageService",
    "PageRenderer",
]
