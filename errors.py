"""Exceptions raised while building a print buffer."""

from __future__ import annotations

from typing import Any


class PrinterError(Exception):
    """Base class for buffer construction errors."""


class UnsupportedFeatureError(PrinterError):
    """Feature has no encoder for the session's printer type."""

    def __init__(self, feature: Any, printer_type: Any) -> None:
        self.feature = feature
        self.printer_type = printer_type
        super().__init__(
            f"{_label(feature)} not supported on '{_label(printer_type)}'"
        )


class UnknownCodePageError(PrinterError, KeyError):
    """Code page name is absent from the printer's code page table."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Code page not recognized: '{self.name}'"


class InvalidImageError(PrinterError, ValueError):
    """Image file missing, not a PNG, or not decodable."""


def _label(value: Any) -> str:
    return str(getattr(value, "value", value))
