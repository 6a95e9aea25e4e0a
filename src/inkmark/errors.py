"""Exception types raised by inkmark."""


class WatermarkError(Exception):
    """Base class for all watermarking failures."""


class ImageDecodeError(WatermarkError):
    """An input image could not be parsed into pixel data."""


class RenderSurfaceError(WatermarkError):
    """The output surface could not be allocated at the requested size."""


class LogoFetchError(WatermarkError):
    """The configured logo source could not be resolved to image bytes."""


class SettingsError(WatermarkError):
    """The watermark settings document is unreadable or invalid."""
