import io

import numpy as np
import pytest
from PIL import Image


def encode_image(image: Image.Image, fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def decode_rgba(data: bytes) -> np.ndarray:
    with Image.open(io.BytesIO(data)) as img:
        return np.array(img.convert("RGBA"))


def gradient_image(width: int, height: int) -> Image.Image:
    """RGB gradient so that misplaced pixels are easy to spot."""
    xs = np.linspace(0, 255, width, dtype=np.float32)
    ys = np.linspace(0, 255, height, dtype=np.float32)
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[:, :, 0] = xs[np.newaxis, :].astype(np.uint8)
    arr[:, :, 1] = ys[:, np.newaxis].astype(np.uint8)
    arr[:, :, 2] = 128
    return Image.fromarray(arr)


@pytest.fixture
def gray_base() -> bytes:
    """1000x1000 opaque mid-gray PNG."""
    return encode_image(Image.new("RGB", (1000, 1000), (100, 100, 100)))


@pytest.fixture
def gradient_base() -> bytes:
    return encode_image(gradient_image(640, 480))


@pytest.fixture
def red_logo() -> bytes:
    """200x100 (2:1) opaque red RGBA PNG."""
    return encode_image(Image.new("RGBA", (200, 100), (255, 0, 0, 255)))


@pytest.fixture
def square_logo() -> bytes:
    return encode_image(Image.new("RGBA", (100, 100), (0, 0, 255, 255)))


@pytest.fixture
def image_file(tmp_path, gradient_base):
    path = tmp_path / "tattoo1.png"
    path.write_bytes(gradient_base)
    return path


@pytest.fixture
def logo_file(tmp_path, red_logo):
    path = tmp_path / "logo-watermark.png"
    path.write_bytes(red_logo)
    return path
