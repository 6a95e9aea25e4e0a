# config.py
import os

from dotenv import load_dotenv

from .core import DEFAULT_OUTPUT_FORMAT, JPEG_QUALITY

# Load environment variables from .env file.
load_dotenv()


def load_config() -> dict:
    """
    Loads configuration from environment variables and returns a dictionary.
    """
    return {
        # General Settings
        "DEBUG_MODE": os.getenv("DEBUG_MODE", "False").lower() == "true",

        # Settings document and logo storage
        "SETTINGS_PATH": os.getenv("INKMARK_SETTINGS_PATH", "watermark_settings.json"),
        "LOGO_DIR": os.getenv("INKMARK_LOGO_DIR", "logos"),

        # Output encoding
        "OUTPUT_FORMAT": os.getenv("INKMARK_OUTPUT_FORMAT", DEFAULT_OUTPUT_FORMAT).upper(),
        "OUTPUT_QUALITY": int(os.getenv("INKMARK_OUTPUT_QUALITY", JPEG_QUALITY)),

        # Remote logo fetch
        "HTTP_TIMEOUT": float(os.getenv("INKMARK_HTTP_TIMEOUT", 10)),
    }
