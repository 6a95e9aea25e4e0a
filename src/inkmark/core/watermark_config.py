import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..errors import SettingsError
from . import (
    DEFAULT_ENABLED,
    DEFAULT_OPACITY,
    DEFAULT_POSITION,
    DEFAULT_SIZE_PERCENT,
)

logger = logging.getLogger(__name__)


class LogoPosition(str, Enum):
    """Named anchor for logo placement."""

    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    CENTER = "center"


@dataclass(frozen=True)
class WatermarkConfig:
    """
    Watermark settings passed by value into each compositing call.

    Values are kept exactly as given. Only the settings form restricts
    opacity and size to its slider ranges.
    """

    enabled: bool = DEFAULT_ENABLED
    opacity: float = DEFAULT_OPACITY
    position: LogoPosition = LogoPosition(DEFAULT_POSITION)
    size_percent: float = DEFAULT_SIZE_PERCENT
    logo_url: str = ""

    @property
    def has_logo(self) -> bool:
        return bool(self.logo_url)

    def to_dict(self) -> dict[str, Any]:
        """Return the settings document form (same keys as the stored document)."""
        return {
            "enabled": self.enabled,
            "logoUrl": self.logo_url,
            "opacity": self.opacity,
            "position": self.position.value,
            "size": self.size_percent,
        }

    @classmethod
    def from_dict(cls, doc: dict[str, Any] | None) -> "WatermarkConfig":
        """
        Build a config from a settings document.

        Missing keys take defaults. An unknown position falls back to the
        default anchor.

        Raises:
            SettingsError: if opacity or size is not a number, or enabled is not a boolean
        """
        if not doc:
            return cls()

        raw_position = doc.get("position", DEFAULT_POSITION)
        try:
            position = LogoPosition(raw_position)
        except ValueError:
            logger.warning(
                "Unknown watermark position %r, using %s", raw_position, DEFAULT_POSITION
            )
            position = LogoPosition(DEFAULT_POSITION)

        try:
            opacity = float(doc.get("opacity", DEFAULT_OPACITY))
            size_percent = float(doc.get("size", DEFAULT_SIZE_PERCENT))
        except (TypeError, ValueError) as e:
            raise SettingsError(f"Invalid watermark settings value: {e}") from e

        enabled = doc.get("enabled", DEFAULT_ENABLED)
        if not isinstance(enabled, bool):
            raise SettingsError(
                f"Invalid watermark settings value: enabled must be true or false, got {enabled!r}"
            )

        return cls(
            enabled=enabled,
            opacity=opacity,
            position=position,
            size_percent=size_percent,
            logo_url=str(doc.get("logoUrl") or ""),
        )
