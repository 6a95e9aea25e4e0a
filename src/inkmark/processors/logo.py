import base64
import binascii
import logging
from pathlib import Path

import requests

from ..errors import LogoFetchError

logger = logging.getLogger(__name__)

# Cache remote logos to avoid refetching for every image in a batch
_remote_logo_cache: dict[str, bytes] = {}


def _decode_data_uri(source: str) -> bytes:
    header, sep, payload = source.partition(",")
    if not sep or ";base64" not in header:
        raise LogoFetchError("Logo data URI must be base64 encoded")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise LogoFetchError(f"Invalid base64 in logo data URI: {e}") from e


def _fetch_remote(url: str, timeout: float) -> bytes:
    if url not in _remote_logo_cache:
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise LogoFetchError(f"Could not fetch logo from {url}: {e}") from e
        logger.debug("Fetched logo from %s (%d bytes)", url, len(response.content))
        _remote_logo_cache[url] = response.content
    return _remote_logo_cache[url]


def load_logo(source: str, timeout: float = 10.0) -> bytes:
    """
    Resolve a logo source to encoded image bytes.

    Args:
        source: data: URI, http(s) URL or local file path
        timeout: Seconds to wait for a remote logo

    Returns:
        Raw logo bytes (decoding happens in the compositor)

    Raises:
        LogoFetchError: if the source cannot be resolved
    """
    if not source:
        raise LogoFetchError("No logo configured")

    if source.startswith("data:"):
        return _decode_data_uri(source)

    if source.startswith(("http://", "https://")):
        return _fetch_remote(source, timeout)

    path = Path(source).expanduser()
    try:
        return path.read_bytes()
    except OSError as e:
        raise LogoFetchError(f"Could not read logo file {path}: {e}") from e


def clear_logo_cache() -> None:
    """Forget fetched remote logos (call after the logo URL changes)."""
    _remote_logo_cache.clear()
