"""Configuration module - loads printer settings from the environment / .env file."""

import logging
import os

from dotenv import load_dotenv

# .env is optional; real environment variables take precedence
load_dotenv()

logger = logging.getLogger(__name__)


def _parse_bool(value: str | None) -> bool:
    """Parse string to bool; default False for missing/invalid."""
    if not value:
        return False
    return value.strip().lower() in ("true", "1", "yes", "on")


def _parse_int(key: str, default: str) -> int:
    """Parse integer env var; log warning and raise if malformed."""
    raw = os.getenv(key, default).strip() or default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s in .env: %r", key, raw)
        raise ValueError(f"Invalid value for {key}: {raw!r}") from None


def _parse_float(key: str, default: str) -> float:
    raw = os.getenv(key, default).strip() or default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid number for %s in .env: %r", key, raw)
        raise ValueError(f"Invalid value for {key}: {raw!r}") from None


def _parse_line_char(value: str | None) -> bytes | None:
    """Line character for draw_line: a literal character or a 0x.. byte."""
    if not value or not value.strip():
        return None
    raw = value.strip()
    if raw.lower().startswith("0x"):
        return bytes((int(raw, 16),))
    return raw.encode("utf-8")


# Printer family: "epson" or "star"
PRINTER_TYPE: str = os.getenv("PRINTER_TYPE", "epson").strip().lower()
# "mock", "tcp://host:port", "serial:/dev/ttyUSB0" or a bare device path
PRINTER_INTERFACE: str = os.getenv("PRINTER_INTERFACE", "mock").strip()
PRINTER_WIDTH: int = _parse_int("PRINTER_WIDTH", "48")
REMOVE_SPECIAL_CHARACTERS: bool = _parse_bool(os.getenv("REMOVE_SPECIAL_CHARACTERS", "false"))
LINE_CHARACTER: bytes | None = _parse_line_char(os.getenv("LINE_CHARACTER"))
MOCK_PRINTER: bool = _parse_bool(os.getenv("MOCK_PRINTER", "false"))

NETWORK_TIMEOUT: float = _parse_float("NETWORK_TIMEOUT", "60")

# Serial line settings for python-escpos Serial printer (optional)
BAUDRATE: int = _parse_int("BAUDRATE", "9600")
SERIAL_BYTESIZE: int = _parse_int("SERIAL_BYTESIZE", "8")
SERIAL_PARITY: str = os.getenv("SERIAL_PARITY", "N").strip().upper()
SERIAL_STOPBITS: int = _parse_int("SERIAL_STOPBITS", "1")
SERIAL_TIMEOUT: float = _parse_float("SERIAL_TIMEOUT", "1.0")
SERIAL_DSRDTR: bool = _parse_bool(os.getenv("SERIAL_DSRDTR", "true"))

LOG_FILE: str = os.getenv("LOG_FILE", "logs/app.log").strip()
