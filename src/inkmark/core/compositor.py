import base64
import logging

from . import DEFAULT_OUTPUT_FORMAT, JPEG_QUALITY, OUTPUT_FORMATS
from .backend import PillowBackend, RenderBackend
from .position import LogoPlacement, calculate_logo_placement
from .watermark_config import WatermarkConfig

logger = logging.getLogger(__name__)


def composite(
    base: bytes,
    logo: bytes | None,
    config: WatermarkConfig,
    *,
    output_format: str = DEFAULT_OUTPUT_FORMAT,
    quality: int = JPEG_QUALITY,
    backend: RenderBackend | None = None,
) -> bytes:
    """
    Alpha-blend the studio logo onto a base image.

    Returns `base` itself when watermarking is disabled or no logo is
    configured. Inputs are never modified.

    Args:
        base: Encoded base image
        logo: Encoded logo image, ideally with an alpha channel
        config: Watermark settings for this call
        output_format: JPEG, PNG or WEBP
        quality: Encoder quality for lossy formats
        backend: Drawing backend, PillowBackend by default

    Returns:
        Encoded composited image

    Raises:
        ImageDecodeError: if either image cannot be decoded
        RenderSurfaceError: if the output surface cannot be allocated
    """
    if not config.enabled or not config.has_logo or logo is None:
        return base

    backend = backend or PillowBackend()

    base_image = backend.decode(base)
    logo_image = backend.decode(logo)
    base_w, base_h = base_image.size
    logo_w, logo_h = logo_image.size

    surface = backend.create_surface(base_w, base_h)
    backend.draw_scaled_with_alpha(
        surface, base_image, LogoPlacement(0.0, 0.0, base_w, base_h), 1.0
    )

    placement = calculate_logo_placement(
        base_w, base_h, logo_w, logo_h, config.size_percent, config.position
    )
    logger.debug(
        "Logo %dx%d -> %.1fx%.1f at (%.1f, %.1f) on %dx%d, opacity %.2f",
        logo_w,
        logo_h,
        placement.width,
        placement.height,
        placement.x,
        placement.y,
        base_w,
        base_h,
        config.opacity,
    )
    backend.draw_scaled_with_alpha(surface, logo_image, placement, config.opacity)

    return backend.encode(surface, output_format, quality)


def to_data_uri(data: bytes, output_format: str = DEFAULT_OUTPUT_FORMAT) -> str:
    """Wrap encoded image bytes in a base64 data URI."""
    mime = OUTPUT_FORMATS[output_format.upper()]
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
