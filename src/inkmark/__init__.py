"""Logo watermarking for tattoo studio portfolio images."""

from .core.compositor import composite, to_data_uri
from .core.watermark_config import LogoPosition, WatermarkConfig
from .errors import (
    ImageDecodeError,
    LogoFetchError,
    RenderSurfaceError,
    SettingsError,
    WatermarkError,
)

__version__ = "0.1.0"

__all__ = [
    "composite",
    "to_data_uri",
    "LogoPosition",
    "WatermarkConfig",
    "WatermarkError",
    "ImageDecodeError",
    "RenderSurfaceError",
    "LogoFetchError",
    "SettingsError",
]
