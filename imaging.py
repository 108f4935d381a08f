"""PNG decoding and monochrome raster packing."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from PIL import Image, UnidentifiedImageError

from errors import InvalidImageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedImage:
    width: int
    height: int
    pixels: bytes  # RGBA, row major


def decode_png(data: bytes) -> DecodedImage:
    """Decode PNG bytes into RGBA pixels.

    Raises:
        InvalidImageError: If the data is not a decodable PNG image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.format != "PNG":
                raise InvalidImageError(f"Expected PNG data, got {img.format}")
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidImageError(f"Could not decode PNG image: {e}") from e
    return DecodedImage(rgba.width, rgba.height, rgba.tobytes())


def load_png(path: str | Path) -> DecodedImage:
    """Read and decode a PNG file.

    Raises:
        InvalidImageError: If the file is missing or not a PNG image.
    """
    path = Path(path)
    if not path.is_file():
        raise InvalidImageError(f"Image file not found: {path}")
    if path.suffix.lower() != ".png":
        raise InvalidImageError("Image printing supports only PNG files.")
    logger.debug("Loading image %s", path)
    return decode_png(path.read_bytes())


def is_dark(r: int, g: int, b: int, a: int) -> bool:
    """Whether a pixel should be printed (transparent counts as paper)."""
    if a <= 126:
        return False
    return (r * 299 + g * 587 + b * 114) // 1000 < 128


def pack_raster(width: int, height: int, pixels: bytes) -> List[bytes]:
    """Pack RGBA pixels into 1 bit per dot rows, MSB first, 1 = black."""
    if len(pixels) != width * height * 4:
        raise ValueError(
            f"Expected {width * height * 4} bytes of RGBA data, got {len(pixels)}"
        )
    row_bytes = (width + 7) // 8
    rows: List[bytes] = []
    for y in range(height):
        row = bytearray(row_bytes)
        offset = y * width * 4
        for x in range(width):
            i = offset + x * 4
            if is_dark(pixels[i], pixels[i + 1], pixels[i + 2], pixels[i + 3]):
                row[x >> 3] |= 0x80 >> (x & 7)
        rows.append(bytes(row))
    return rows
