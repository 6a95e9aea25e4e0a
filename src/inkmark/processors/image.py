import io
import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from ..core import DEFAULT_OUTPUT_FORMAT, JPEG_QUALITY, OUTPUT_FORMATS
from ..core.compositor import composite, to_data_uri
from ..core.watermark_config import WatermarkConfig
from ..errors import WatermarkError

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_FORMATS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tiff"}

OUTPUT_SUFFIXES = {"JPEG": ".jpg", "PNG": ".png", "WEBP": ".webp"}


@dataclass
class WatermarkResult:
    """Outcome of watermarking one file."""

    source_path: Path
    output_path: Path
    watermarked: bool
    error: str | None = None


def is_supported_image(path: Path) -> bool:
    """Check if file is a supported image format."""
    return path.suffix.lower() in SUPPORTED_IMAGE_FORMATS


def _sniff_format(data: bytes) -> str:
    """Best-effort output format name of already encoded bytes."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = (img.format or "").upper()
    except (UnidentifiedImageError, OSError):
        return DEFAULT_OUTPUT_FORMAT
    return fmt if fmt in OUTPUT_FORMATS else DEFAULT_OUTPUT_FORMAT


def render_image(
    input_path: Path,
    config: WatermarkConfig,
    logo: bytes | None,
    output_format: str = DEFAULT_OUTPUT_FORMAT,
    quality: int = JPEG_QUALITY,
) -> tuple[bytes, bool, str | None]:
    """
    Composite one image file in memory.

    Returns:
        (data, watermarked, error). On failure `data` is the unmodified
        input and `error` describes what went wrong.
    """
    base = input_path.read_bytes()
    try:
        data = composite(base, logo, config, output_format=output_format, quality=quality)
    except WatermarkError as e:
        logger.warning("Watermarking %s failed, keeping original: %s", input_path.name, e)
        return base, False, str(e)
    return data, data is not base, None


def output_path_for(
    input_path: Path,
    watermarked: bool,
    suffix: str = "_watermarked",
    output_format: str = DEFAULT_OUTPUT_FORMAT,
    output_dir: Path | None = None,
) -> Path:
    """Default output name: input stem plus suffix, extension of what is written."""
    extension = OUTPUT_SUFFIXES[output_format.upper()] if watermarked else input_path.suffix
    return (output_dir or input_path.parent) / f"{input_path.stem}{suffix}{extension}"


def process_image(
    input_path: Path,
    config: WatermarkConfig,
    logo: bytes | None,
    output_path: Path | None = None,
    suffix: str = "_watermarked",
    output_format: str = DEFAULT_OUTPUT_FORMAT,
    quality: int = JPEG_QUALITY,
    output_dir: Path | None = None,
) -> WatermarkResult:
    """
    Watermark a single image file.

    If compositing fails, the unmodified image is written instead and the
    error is reported on the result.

    Args:
        input_path: Path to input image
        config: Watermark settings
        logo: Encoded logo bytes, None if no logo could be resolved
        output_path: Optional explicit output path. If None, uses input name with suffix.
        suffix: Suffix to add to filename if output_path not specified
        output_format: JPEG, PNG or WEBP
        quality: Encoder quality for lossy formats
        output_dir: Directory for the default output name, input's directory if None

    Returns:
        WatermarkResult describing what was written
    """
    data, watermarked, error = render_image(input_path, config, logo, output_format, quality)
    if output_path is None:
        output_path = output_path_for(input_path, watermarked, suffix, output_format, output_dir)
    return write_result(input_path, output_path, data, watermarked, error)


def write_result(
    input_path: Path,
    output_path: Path,
    data: bytes,
    watermarked: bool,
    error: str | None = None,
) -> WatermarkResult:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)

    return WatermarkResult(
        source_path=input_path,
        output_path=output_path,
        watermarked=watermarked,
        error=error,
    )


def render_preview(
    image_path: Path,
    config: WatermarkConfig,
    logo: bytes | None,
    output_format: str = DEFAULT_OUTPUT_FORMAT,
    quality: int = JPEG_QUALITY,
) -> str:
    """
    Render a watermarked preview as a data URI.

    Falls back to the unmodified image when compositing fails.
    """
    base = image_path.read_bytes()
    try:
        data = composite(base, logo, config, output_format=output_format, quality=quality)
    except WatermarkError as e:
        logger.warning("Preview of %s failed, showing original: %s", image_path.name, e)
        data = base

    if data is base:
        return to_data_uri(base, _sniff_format(base))
    return to_data_uri(data, output_format)
