"""
Drawing capabilities used by the compositor.

The compositing algorithm only talks to a RenderBackend, so it can run on
any raster library that can decode, allocate a surface, draw a scaled image
with an alpha multiplier, and encode. PillowBackend is the headless
implementation built on Pillow and numpy.
"""

import io
import math
from typing import Protocol

import numpy as np
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError

from ..errors import ImageDecodeError, RenderSurfaceError
from . import JPEG_QUALITY, OUTPUT_FORMATS
from .blend import blend_layer
from .position import LogoPlacement


class RenderBackend(Protocol):
    def decode(self, data: bytes) -> Image.Image: ...

    def create_surface(self, width: int, height: int) -> NDArray[np.uint8]: ...

    def draw_scaled_with_alpha(
        self,
        surface: NDArray[np.uint8],
        image: Image.Image,
        rect: LogoPlacement,
        alpha: float,
    ) -> None: ...

    def encode(self, surface: NDArray[np.uint8], fmt: str, quality: int = JPEG_QUALITY) -> bytes: ...


class PillowBackend:
    """RenderBackend on Pillow images and numpy RGBA surfaces."""

    resample = Image.Resampling.LANCZOS

    def decode(self, data: bytes) -> Image.Image:
        """
        Decode image bytes into a fully loaded RGBA image.

        Raises:
            ImageDecodeError: if the bytes are not a readable image
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                return img.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageDecodeError(f"Could not decode image: {e}") from e

    def create_surface(self, width: int, height: int) -> NDArray[np.uint8]:
        """
        Allocate a transparent RGBA surface.

        Raises:
            RenderSurfaceError: if a dimension is not positive or memory runs out
        """
        if width <= 0 or height <= 0:
            raise RenderSurfaceError(f"Invalid surface size {width}x{height}")
        try:
            return np.zeros((height, width, 4), dtype=np.uint8)
        except (MemoryError, ValueError) as e:
            raise RenderSurfaceError(f"Could not allocate {width}x{height} surface") from e

    def draw_scaled_with_alpha(
        self,
        surface: NDArray[np.uint8],
        image: Image.Image,
        rect: LogoPlacement,
        alpha: float,
    ) -> None:
        """
        Scale `image` into `rect` and blend it onto the surface.

        Only the part of the rect that lands on the surface is resampled, so
        memory use is bounded by the surface size however large the rect is.
        Non-finite rects or alphas, empty rects and rects entirely off the
        surface draw nothing.
        """
        if not all(math.isfinite(v) for v in (rect.x, rect.y, rect.width, rect.height, alpha)):
            return
        left, top, width, height = rect.box()
        # Degenerate sizes draw nothing
        if width <= 0 or height <= 0:
            return

        surf_h, surf_w = surface.shape[:2]
        x0, y0 = max(left, 0), max(top, 0)
        x1, y1 = min(left + width, surf_w), min(top + height, surf_h)
        if x0 >= x1 or y0 >= y1:
            return

        if (x0, y0, x1, y1) == (left, top, left + width, top + height):
            visible = image if image.size == (width, height) else image.resize((width, height), self.resample)
        else:
            scale_x = image.width / width
            scale_y = image.height / height
            source_box = (
                (x0 - left) * scale_x,
                (y0 - top) * scale_y,
                min((x1 - left) * scale_x, image.width),
                min((y1 - top) * scale_y, image.height),
            )
            visible = image.resize((x1 - x0, y1 - y0), self.resample, box=source_box)

        layer = np.asarray(visible.convert("RGBA"), dtype=np.uint8)
        blend_layer(surface, layer, x0, y0, alpha)

    def encode(self, surface: NDArray[np.uint8], fmt: str, quality: int = JPEG_QUALITY) -> bytes:
        """Encode an RGBA surface as JPEG, PNG or WEBP bytes."""
        fmt = fmt.upper()
        if fmt not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {fmt}")

        image = Image.fromarray(surface)
        # JPEG has no alpha channel
        if fmt == "JPEG":
            image = image.convert("RGB")

        buffer = io.BytesIO()
        if fmt == "PNG":
            image.save(buffer, format=fmt)
        else:
            image.save(buffer, format=fmt, quality=quality)
        return buffer.getvalue()
