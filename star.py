"""STAR (Line Mode) command set and device encoders."""

from __future__ import annotations

from typing import Union

from escpos.constants import CTL_LF, CTL_VT, ESC, GS

from commands import CommandSet
from imaging import load_png, pack_raster

COMMANDS = CommandSet(
    line_feed=CTL_LF,
    vertical_tab=CTL_VT,
    hw_init=ESC + b"@",
    bold_on=ESC + b"E",
    bold_off=ESC + b"F",
    underline_on=ESC + b"-\x01",
    # No thick underline in Line Mode
    underline_thick_on=ESC + b"-\x01",
    underline_off=ESC + b"-\x00",
    invert_on=ESC + b"4",
    invert_off=ESC + b"5",
    upside_down_on=b"\x0f",
    upside_down_off=b"\x12",
    align_left=ESC + GS + b"a\x00",
    align_center=ESC + GS + b"a\x01",
    align_right=ESC + GS + b"a\x02",
    font_a=ESC + b"\x1eF\x00",
    font_b=ESC + b"\x1eF\x01",
    text_normal=ESC + b"i\x00\x00",
    text_double_height=ESC + b"i\x01\x00",
    text_double_width=ESC + b"i\x00\x01",
    text_quad_area=ESC + b"i\x01\x01",
    full_cut=ESC + b"d\x02",
    partial_cut=ESC + b"d\x03",
)

# BEL drives the drawer on Line Mode printers
CASH_DRAWER = b"\x07"

QR_MODELS = {1: b"\x01", 2: b"\x02"}
QR_CORRECTION = {"L": b"\x00", "M": b"\x01", "Q": b"\x02", "H": b"\x03"}

_QR = ESC + GS + b"y"
_PDF417 = ESC + GS + b"x"
_RASTER = ESC + b"*r"

Data = Union[str, bytes]


def _as_bytes(data: Data, encoding: str = "utf-8") -> bytes:
    return data.encode(encoding) if isinstance(data, str) else bytes(data)


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be {low}-{high}, got {value}")


def _length(payload: bytes) -> bytes:
    if len(payload) > 0xFFFF:
        raise ValueError("Symbol data too long")
    return len(payload).to_bytes(2, "little")


def cut() -> bytes:
    return CTL_VT + CTL_VT + COMMANDS.full_cut + COMMANDS.hw_init


def partial_cut() -> bytes:
    return CTL_VT + CTL_VT + COMMANDS.partial_cut + COMMANDS.hw_init


def open_cash_drawer() -> bytes:
    return CASH_DRAWER


def qr(data: Data, model: int = 2, cell_size: int = 4, correction: str = "M") -> bytes:
    """Store and print a QR code (ESC GS y)."""
    if model not in QR_MODELS:
        raise ValueError(f"Invalid QR model: {model}")
    _check_range("QR cell size", cell_size, 1, 8)
    level = QR_CORRECTION.get(str(correction).upper())
    if level is None:
        raise ValueError(f"Invalid QR error correction level: {correction!r}")

    payload = _as_bytes(data)
    return (
        _QR + b"S0" + QR_MODELS[model]
        + _QR + b"S1" + level
        + _QR + b"S2" + bytes((cell_size,))
        # D1: store with automatic mode analysis
        + _QR + b"D1\x00" + _length(payload) + payload
        + _QR + b"P"
    )


def code128(data: Data, width: int = 2, height: int = 40, text: bool = True) -> bytes:
    """Print a Code128 barcode (ESC b n1 n2 n3 n4 d RS).

    ``width`` is the Line Mode module width selector 1-3, ``text`` prints
    the human readable digits under the bars.
    """
    _check_range("Code128 module width", width, 1, 3)
    _check_range("Code128 height", height, 1, 255)
    payload = _as_bytes(data, "ascii")
    if not payload:
        raise ValueError("Code128 data must not be empty")
    # n1 '6' = Code128; n2 '4'/'3' = with/without HRI, feed after
    hri = b"4" if text else b"3"
    return (
        ESC + b"b6" + hri + bytes((0x30 + width, height)) + payload + b"\x1e"
    )


def pdf417(
    data: Data,
    lines: int = 0,
    columns: int = 0,
    correction: int = 1,
    module_width: int = 2,
    aspect: int = 3,
) -> bytes:
    """Store and print a PDF417 symbol (ESC GS x)."""
    _check_range("PDF417 lines", lines, 0, 99)
    _check_range("PDF417 columns", columns, 0, 30)
    _check_range("PDF417 correction level", correction, 0, 8)
    _check_range("PDF417 module width", module_width, 1, 10)
    _check_range("PDF417 aspect ratio", aspect, 1, 10)

    payload = _as_bytes(data)
    return (
        _PDF417 + b"S0\x00" + bytes((lines, columns))
        + _PDF417 + b"S1" + bytes((correction,))
        + _PDF417 + b"S2" + bytes((module_width,))
        + _PDF417 + b"S3" + bytes((aspect,))
        + _PDF417 + b"D" + _length(payload) + payload
        + _PDF417 + b"P"
    )


def image_buffer(width: int, height: int, pixels: bytes) -> bytes:
    """Raster-print RGBA pixels in ``ESC * r`` raster mode."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size {width}x{height}")
    out = bytearray()
    out += _RASTER + b"R"  # initialize raster mode
    out += _RASTER + b"A"  # enter raster mode
    out += _RASTER + b"P0\x00"  # continuous page length
    for row in pack_raster(width, height, pixels):
        out += b"b" + _length(row) + row
    out += _RASTER + b"B"  # quit raster mode
    return bytes(out)


def image(path: str) -> bytes:
    """Read a PNG file and raster-print it."""
    decoded = load_png(path)
    return image_buffer(decoded.width, decoded.height, decoded.pixels)
