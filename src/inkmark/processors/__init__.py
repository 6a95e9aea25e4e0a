from .image import (
    SUPPORTED_IMAGE_FORMATS,
    WatermarkResult,
    is_supported_image,
    output_path_for,
    process_image,
    render_image,
    render_preview,
    write_result,
)
from .logo import clear_logo_cache, load_logo

__all__ = [
    "process_image",
    "render_image",
    "output_path_for",
    "write_result",
    "render_preview",
    "is_supported_image",
    "load_logo",
    "clear_logo_cache",
    "WatermarkResult",
    "SUPPORTED_IMAGE_FORMATS",
]
