# Placement constants
MARGIN: int = 20  # Pixel offset from the edge for corner anchors

# Output encoding
DEFAULT_OUTPUT_FORMAT: str = "JPEG"
JPEG_QUALITY: int = 92  # Matches canvas.toDataURL("image/jpeg", 0.92)
OUTPUT_FORMATS: dict[str, str] = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}

# Settings document defaults
DEFAULT_ENABLED: bool = True
DEFAULT_OPACITY: float = 0.5
DEFAULT_POSITION: str = "bottom-right"
DEFAULT_SIZE_PERCENT: float = 30.0

# Settings form ranges (only the form enforces these, never the compositor)
OPACITY_MIN: float = 0.1
OPACITY_MAX: float = 1.0
OPACITY_STEP: float = 0.05
SIZE_MIN: float = 5.0
SIZE_MAX: float = 50.0
SIZE_STEP: float = 1.0
