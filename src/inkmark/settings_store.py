"""
Settings Store - Watermark settings persistence.

Keeps the watermark settings document (enabled, logoUrl, opacity,
position, size) in a JSON file and stores uploaded studio logos.
"""

import dataclasses
import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .core.watermark_config import WatermarkConfig
from .errors import ImageDecodeError, SettingsError

logger = logging.getLogger(__name__)

SUPPORTED_LOGO_FORMATS = {".png", ".jpg", ".jpeg", ".webp"}


class SettingsRepository:
    """JSON file backed store for the watermark settings document."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> WatermarkConfig:
        """
        Load the saved settings, or defaults if nothing was saved yet.

        Raises:
            SettingsError: if the file is not a valid settings document
        """
        if not self.path.exists():
            logger.debug("No settings at %s, using defaults", self.path)
            return WatermarkConfig()

        try:
            doc = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SettingsError(f"Could not read settings from {self.path}: {e}") from e

        if not isinstance(doc, dict):
            raise SettingsError(f"Settings in {self.path} must be a JSON object")

        return WatermarkConfig.from_dict(doc)

    def save(self, config: WatermarkConfig) -> None:
        """Write the settings document, replacing any previous one atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        replaced = False
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(config.to_dict(), f, indent=2)
            os.replace(tmp_name, self.path)
            replaced = True
        except (OSError, TypeError, ValueError) as e:
            raise SettingsError(f"Could not save settings to {self.path}: {e}") from e
        finally:
            if not replaced:
                Path(tmp_name).unlink(missing_ok=True)
        logger.info("Watermark settings saved to %s", self.path)

    def update(self, **changes) -> WatermarkConfig:
        """Apply field changes to the saved settings and save them."""
        config = dataclasses.replace(self.load(), **changes)
        self.save(config)
        return config

    def reset(self) -> WatermarkConfig:
        """Restore and save the default settings."""
        config = WatermarkConfig()
        self.save(config)
        return config


def upload_logo(source: Path, logo_dir: Path) -> Path:
    """
    Store a logo file in the studio logo directory.

    The stored name is derived from the file content, so uploading the same
    logo twice yields the same path.

    Args:
        source: Logo image to store (PNG, JPEG or WEBP)
        logo_dir: Directory holding uploaded logos

    Returns:
        Path of the stored logo, to be saved as the settings' logo URL

    Raises:
        ImageDecodeError: if the file is not a readable image
        ValueError: if the file extension is not supported
    """
    suffix = source.suffix.lower()
    if suffix not in SUPPORTED_LOGO_FORMATS:
        raise ValueError(
            f"Unsupported logo format {suffix!r}, use one of {sorted(SUPPORTED_LOGO_FORMATS)}"
        )

    data = source.read_bytes()
    try:
        with Image.open(source) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ImageDecodeError(f"Logo {source} is not a readable image: {e}") from e

    digest = hashlib.sha256(data).hexdigest()[:16]
    logo_dir.mkdir(parents=True, exist_ok=True)
    target = logo_dir / f"logo-{digest}{suffix}"
    if not target.exists():
        target.write_bytes(data)
        logger.info("Logo uploaded to %s", target)

    return target
