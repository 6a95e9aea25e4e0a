from dataclasses import dataclass

from . import MARGIN
from .watermark_config import LogoPosition


@dataclass
class LogoPlacement:
    """Logo draw rectangle in base image pixels (sub-pixel precision)."""

    x: float
    y: float
    width: float
    height: float

    def box(self) -> tuple[int, int, int, int]:
        """Rounded (left, top, width, height) for rasterisation."""
        return round(self.x), round(self.y), round(self.width), round(self.height)


def calculate_logo_placement(
    base_width: int,
    base_height: int,
    logo_width: int,
    logo_height: int,
    size_percent: float,
    position: LogoPosition,
    margin: int = MARGIN,
) -> LogoPlacement:
    """
    Calculate where the logo is drawn on the base image.

    Logo width is a percentage of the base width; height follows the logo's
    native aspect ratio. Corner anchors sit `margin` pixels from their edges.
    Nothing is clamped, so large sizes may extend past the canvas.
    """
    width = base_width * (size_percent / 100)
    height = logo_height * (width / logo_width)

    if position is LogoPosition.TOP_LEFT:
        x, y = margin, margin
    elif position is LogoPosition.TOP_RIGHT:
        x, y = base_width - width - margin, margin
    elif position is LogoPosition.BOTTOM_LEFT:
        x, y = margin, base_height - height - margin
    elif position is LogoPosition.BOTTOM_RIGHT:
        x, y = base_width - width - margin, base_height - height - margin
    else:
        x, y = (base_width - width) / 2, (base_height - height) / 2

    return LogoPlacement(x=float(x), y=float(y), width=width, height=height)
