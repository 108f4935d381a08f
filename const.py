"""Shared constants: printer families and session defaults."""

from __future__ import annotations

from enum import Enum


class PrinterType(str, Enum):
    """Control-code protocol family spoken by the target printer."""

    EPSON = "epson"
    STAR = "star"

    @classmethod
    def from_string(cls, value: str) -> "PrinterType":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown printer type: {value!r}") from None


DEFAULT_WIDTH = 48
DEFAULT_CODE_PAGE = "PC437_USA"
# Box drawing horizontal in PC437
DEFAULT_LINE_CHAR = b"\xc4"
