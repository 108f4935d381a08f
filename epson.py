"""EPSON (ESC/POS) command set and device encoders.

Every encoder returns the complete command bytes for one element; nothing
here touches a session or a device. 2D symbols (QR, MaxiCode, PDF417) use the
``GS ( k`` function family, 1D barcodes use ``GS k`` format B, raster images
are rendered with python-escpos' ``Dummy`` printer (``GS v 0``).
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Union

from escpos.constants import (
    CD_KICK_2,
    CD_KICK_5,
    CTL_LF,
    CTL_VT,
    ESC,
    GS,
    HW_INIT,
    PAPER_FULL_CUT,
    PAPER_PART_CUT,
)
from escpos.printer import Dummy
from PIL import Image

from commands import CommandSet
from imaging import load_png

logger = logging.getLogger(__name__)

COMMANDS = CommandSet(
    line_feed=CTL_LF,
    vertical_tab=CTL_VT,
    hw_init=HW_INIT,
    bold_on=ESC + b"E\x01",
    bold_off=ESC + b"E\x00",
    underline_on=ESC + b"-\x01",
    underline_thick_on=ESC + b"-\x02",
    underline_off=ESC + b"-\x00",
    invert_on=GS + b"B\x01",
    invert_off=GS + b"B\x00",
    upside_down_on=ESC + b"{\x01",
    upside_down_off=ESC + b"{\x00",
    align_left=ESC + b"a\x00",
    align_center=ESC + b"a\x01",
    align_right=ESC + b"a\x02",
    font_a=ESC + b"M\x00",
    font_b=ESC + b"M\x01",
    text_normal=ESC + b"!\x00",
    text_double_height=ESC + b"!\x10",
    text_double_width=ESC + b"!\x20",
    text_quad_area=ESC + b"!\x30",
    full_cut=PAPER_FULL_CUT,
    partial_cut=PAPER_PART_CUT,
)

# ESC B n t: 3 beeps, 200 ms each
BEEP = ESC + b"B\x03\x02"

QR_MODELS = {1: b"1", 2: b"2", 3: b"3"}
QR_CORRECTION = {"L": b"0", "M": b"1", "Q": b"2", "H": b"3"}

# GS ( k symbol types
_CN_PDF417 = b"0"
_CN_QR = b"1"
_CN_MAXICODE = b"2"

Data = Union[str, bytes]


class BarcodeType(IntEnum):
    """``GS k`` format B symbologies (m = 65..73)."""

    UPC_A = 65
    UPC_E = 66
    EAN13 = 67
    EAN8 = 68
    CODE39 = 69
    ITF = 70
    CODABAR = 71
    CODE93 = 72
    CODE128 = 73


def _as_bytes(data: Data, encoding: str = "utf-8") -> bytes:
    return data.encode(encoding) if isinstance(data, str) else bytes(data)


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be {low}-{high}, got {value}")


def _gs_k(cn: bytes, fn: bytes, params: bytes) -> bytes:
    """GS ( k pL pH cn fn [params]"""
    size = len(params) + 2
    if size > 0xFFFF:
        raise ValueError("2D symbol data too long")
    return GS + b"(k" + size.to_bytes(2, "little") + cn + fn + params


def cut() -> bytes:
    return CTL_VT + CTL_VT + PAPER_FULL_CUT + HW_INIT


def partial_cut() -> bytes:
    return CTL_VT + CTL_VT + PAPER_PART_CUT + HW_INIT


def beep() -> bytes:
    return BEEP


def open_cash_drawer() -> bytes:
    """Kick both drawer connectors (pins 2 and 5)."""
    return CD_KICK_2 + CD_KICK_5


def qr(data: Data, model: int = 2, cell_size: int = 3, correction: str = "M") -> bytes:
    """Store and print a QR code.

    Args:
        data: Symbol content, UTF-8 encoded when given as text.
        model: 1, 2 or 3 (micro QR).
        cell_size: Module size in dots, 1-16.
        correction: Error correction level, one of L, M, Q, H.
    """
    if model not in QR_MODELS:
        raise ValueError(f"Invalid QR model: {model}")
    _check_range("QR cell size", cell_size, 1, 16)
    level = QR_CORRECTION.get(str(correction).upper())
    if level is None:
        raise ValueError(f"Invalid QR error correction level: {correction!r}")

    return (
        _gs_k(_CN_QR, b"A", QR_MODELS[model] + b"\x00")
        + _gs_k(_CN_QR, b"C", bytes((cell_size,)))
        + _gs_k(_CN_QR, b"E", level)
        + _gs_k(_CN_QR, b"P", b"0" + _as_bytes(data))
        + _gs_k(_CN_QR, b"Q", b"0")
    )


def barcode(
    data: Data,
    type: int = BarcodeType.CODE128,
    height: int = 50,
    width: int = 3,
    hri_pos: int = 0,
    hri_font: int = 0,
) -> bytes:
    """Print a 1D barcode.

    ``hri_pos`` places the human readable text: 0 none, 1 above, 2 below,
    3 both. CODE128 data without a ``{`` code set prefix gets ``{B``.
    """
    try:
        symbology = BarcodeType(int(type))
    except ValueError:
        raise ValueError(f"Unsupported barcode type: {type}") from None
    _check_range("Barcode height", height, 1, 255)
    _check_range("Barcode width", width, 2, 6)
    _check_range("HRI position", hri_pos, 0, 3)
    _check_range("HRI font", hri_font, 0, 1)

    payload = _as_bytes(data, "ascii")
    if symbology == BarcodeType.CODE128 and not payload.startswith(b"{"):
        payload = b"{B" + payload
    if not payload or len(payload) > 255:
        raise ValueError(f"Barcode data length must be 1-255, got {len(payload)}")

    return (
        GS + b"h" + bytes((height,))
        + GS + b"w" + bytes((width,))
        + GS + b"f" + bytes((hri_font,))
        + GS + b"H" + bytes((hri_pos,))
        + GS + b"k" + bytes((symbology, len(payload)))
        + payload
    )


def maxi_code(data: Data, mode: int = 4) -> bytes:
    """Store and print a MaxiCode symbol in ``mode`` 2-6."""
    _check_range("MaxiCode mode", mode, 2, 6)
    return (
        _gs_k(_CN_MAXICODE, b"A", bytes((0x30 + mode,)))
        + _gs_k(_CN_MAXICODE, b"P", b"0" + _as_bytes(data))
        + _gs_k(_CN_MAXICODE, b"Q", b"0")
    )


def pdf417(
    data: Data,
    columns: int = 0,
    rows: int = 0,
    width: int = 3,
    height: int = 3,
    correction: int = 1,
    truncated: bool = False,
) -> bytes:
    """Store and print a PDF417 symbol. Zero columns/rows means automatic."""
    _check_range("PDF417 columns", columns, 0, 30)
    if rows != 0:
        _check_range("PDF417 rows", rows, 3, 90)
    _check_range("PDF417 module width", width, 2, 8)
    _check_range("PDF417 row height", height, 2, 8)
    _check_range("PDF417 correction level", correction, 0, 8)

    return (
        _gs_k(_CN_PDF417, b"A", bytes((columns,)))
        + _gs_k(_CN_PDF417, b"B", bytes((rows,)))
        + _gs_k(_CN_PDF417, b"C", bytes((width,)))
        + _gs_k(_CN_PDF417, b"D", bytes((height,)))
        + _gs_k(_CN_PDF417, b"E", b"0" + bytes((0x30 + correction,)))
        + _gs_k(_CN_PDF417, b"F", b"\x01" if truncated else b"\x00")
        + _gs_k(_CN_PDF417, b"P", b"0" + _as_bytes(data))
        + _gs_k(_CN_PDF417, b"Q", b"0")
    )


def image_buffer(width: int, height: int, pixels: bytes) -> bytes:
    """Raster-print RGBA pixels (4 bytes per pixel, row major)."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size {width}x{height}")
    if len(pixels) != width * height * 4:
        raise ValueError(
            f"Expected {width * height * 4} bytes of RGBA data, got {len(pixels)}"
        )
    img = Image.frombytes("RGBA", (width, height), bytes(pixels))
    printer = Dummy()
    printer.image(img, impl="bitImageRaster")
    logger.debug("Rendered %dx%d raster image", width, height)
    return printer.output


def image(path: str) -> bytes:
    """Read a PNG file and raster-print it."""
    decoded = load_png(path)
    return image_buffer(decoded.width, decoded.height, decoded.pixels)
