"""Print job session for EPSON / STAR thermal printers.

A :class:`ThermalPrinter` owns everything one print job needs: the printer
family and line width it was created with, the code page currently active on
the device, and the output buffer. Text, style, layout and device feature
calls append bytes; :meth:`ThermalPrinter.execute` hands the buffer to the
transport.

A session is not safe for concurrent use; give each print job its own.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

import config
import epson
import layout
import star
from capabilities import Feature, resolve
from codepages import CodePageTable, get_code_page_table
from commands import CommandSet
from const import DEFAULT_WIDTH, PrinterType
from encoding import encode_text, remove_special_characters
from errors import PrinterError
from imaging import decode_png
from layout import TableCell
from transports import Transport, transport_from_config

logger = logging.getLogger(__name__)

COMMAND_SETS: Mapping[PrinterType, CommandSet] = {
    PrinterType.EPSON: epson.COMMANDS,
    PrinterType.STAR: star.COMMANDS,
}


class ThermalPrinter:
    """Byte buffer builder for one printer."""

    def __init__(
        self,
        printer_type: Union[PrinterType, str] = PrinterType.EPSON,
        transport: Optional[Transport] = None,
        width: Optional[int] = None,
        remove_special_characters: bool = False,
        line_char: Optional[Union[bytes, str]] = None,
    ) -> None:
        """
        Args:
            printer_type: Printer family, ``PrinterType`` or "epson" / "star".
            transport: Where :meth:`execute` sends the buffer.
            width: Characters per line; 48 when unset or 0.
            remove_special_characters: Strip accents before encoding text.
            line_char: Byte(s) repeated by :meth:`draw_line`.
        """
        if isinstance(printer_type, str) and not isinstance(printer_type, PrinterType):
            printer_type = PrinterType.from_string(printer_type)
        width = int(width) if width else DEFAULT_WIDTH
        if width <= 0:
            raise ValueError(f"Printer width must be positive, got {width}")
        if isinstance(line_char, str):
            line_char = line_char.encode("utf-8")

        self._printer_type = printer_type
        self._width = width
        self._remove_special_characters = bool(remove_special_characters)
        self._line_char = line_char or None
        self.transport = transport

        self._commands = COMMAND_SETS[printer_type]
        self._code_pages: CodePageTable = get_code_page_table(printer_type)
        self._reset_code_page()
        self._buffer = bytearray()

    @classmethod
    def from_config(cls, transport: Optional[Transport] = None) -> "ThermalPrinter":
        """Create a session from config.py / .env settings."""
        return cls(
            printer_type=PrinterType.from_string(config.PRINTER_TYPE),
            transport=transport or transport_from_config(),
            width=config.PRINTER_WIDTH,
            remove_special_characters=config.REMOVE_SPECIAL_CHARACTERS,
            line_char=config.LINE_CHARACTER,
        )

    # ------------------------------------------------------------------ state

    @property
    def printer_type(self) -> PrinterType:
        return self._printer_type

    @property
    def width(self) -> int:
        return self._width

    @property
    def remove_special_characters(self) -> bool:
        return self._remove_special_characters

    @property
    def line_char(self) -> Optional[bytes]:
        return self._line_char

    @property
    def code_page(self) -> str:
        """Name of the code page active on the device."""
        return self._code_page

    @property
    def code_pages(self) -> CodePageTable:
        return self._code_pages

    def get_width(self) -> int:
        return self._width

    def get_buffer(self) -> bytes:
        return bytes(self._buffer)

    def get_text(self) -> str:
        return self._buffer.decode("utf-8", errors="replace")

    def set_buffer(self, data: bytes) -> None:
        self._buffer = bytearray(data)

    def clear(self) -> None:
        """Empty the buffer; the active code page is kept.

        A switch command written earlier is still assumed to have reached the
        device, so the next job sent after ``clear`` relies on it.
        """
        self._buffer = bytearray()

    # ------------------------------------------------------------------- text

    def add(self, data: bytes) -> None:
        """Append raw bytes (control codes) untouched."""
        self._buffer += data

    def print(self, text: object = "") -> None:
        """Append text, switching code pages as needed."""
        text = "" if text is None else str(text)
        result = encode_text(
            text,
            self._code_pages,
            self._code_page,
            normalize=self._remove_special_characters,
            synced=self._code_page_synced,
        )
        self._buffer += result.data
        self._code_page = result.code_page
        self._code_page_synced = result.synced

    def normalize_text(self, text: str) -> str:
        """Text as :meth:`print` will encode it, for measuring widths."""
        if self._remove_special_characters:
            return remove_special_characters(text)
        return text

    def println(self, text: object = "") -> None:
        self.print(text)
        self.add(b"\n")

    def new_line(self) -> None:
        self.add(self._commands.line_feed)

    def print_vertical_tab(self) -> None:
        self.add(self._commands.vertical_tab)

    def set_code_page(self, name: str) -> None:
        """Activate code page ``name`` on the device.

        Raises:
            UnknownCodePageError: If the printer family has no such page.
        """
        page = self._code_pages[name]
        self.add(page.command)
        self._code_page = page.name
        self._code_page_synced = True

    # ----------------------------------------------------------------- styles

    def bold(self, enabled: bool) -> None:
        self.add(self._commands.bold_on if enabled else self._commands.bold_off)

    def underline(self, enabled: bool) -> None:
        self.add(self._commands.underline_on if enabled else self._commands.underline_off)

    def underline_thick(self, enabled: bool) -> None:
        self.add(self._commands.underline_thick_on if enabled else self._commands.underline_off)

    def upside_down(self, enabled: bool) -> None:
        self.add(self._commands.upside_down_on if enabled else self._commands.upside_down_off)

    def invert(self, enabled: bool) -> None:
        self.add(self._commands.invert_on if enabled else self._commands.invert_off)

    def align_left(self) -> None:
        self.add(self._commands.align_left)

    def align_center(self) -> None:
        self.add(self._commands.align_center)

    def align_right(self) -> None:
        self.add(self._commands.align_right)

    def set_type_font_a(self) -> None:
        self.add(self._commands.font_a)

    def set_type_font_b(self) -> None:
        self.add(self._commands.font_b)

    def set_text_normal(self) -> None:
        self.add(self._commands.text_normal)

    def set_text_double_height(self) -> None:
        self.add(self._commands.text_double_height)

    def set_text_double_width(self) -> None:
        self.add(self._commands.text_double_width)

    def set_text_quad_area(self) -> None:
        self.add(self._commands.text_quad_area)

    # ----------------------------------------------------------------- layout

    def draw_line(self) -> None:
        layout.draw_line(self)

    def left_right(self, left: object, right: object) -> None:
        layout.left_right(self, left, right)

    def table(self, cells: Sequence[object]) -> None:
        layout.table(self, cells)

    def table_custom(self, cells: Sequence[Union[TableCell, Mapping[str, Any]]]) -> int:
        return layout.table_custom(self, cells)

    # --------------------------------------------------------------- features

    def _feature(self, feature: Feature, *args: Any, **kwargs: Any) -> bytes:
        encoder = resolve(feature, self._printer_type)
        data = encoder(*args, **kwargs)
        self.add(data)
        return data

    def _reset_code_page(self) -> None:
        # The device page is unknown until a switch command is written
        self._code_page = self._code_pages.default.name
        self._code_page_synced = False

    def cut(self) -> None:
        self._feature(Feature.CUT)
        # The trailing init command resets the device
        self._reset_code_page()

    def partial_cut(self) -> None:
        self._feature(Feature.PARTIAL_CUT)
        self._reset_code_page()

    def beep(self) -> None:
        self._feature(Feature.BEEP)

    def open_cash_drawer(self) -> None:
        self._feature(Feature.CASH_DRAWER)

    def print_qr(self, data: Union[str, bytes], **settings: Any) -> bytes:
        return self._feature(Feature.QR, data, **settings)

    def print_barcode(self, data: Union[str, bytes], type: int = epson.BarcodeType.CODE128, **settings: Any) -> bytes:
        return self._feature(Feature.BARCODE, data, type, **settings)

    def maxi_code(self, data: Union[str, bytes], **settings: Any) -> bytes:
        return self._feature(Feature.MAXICODE, data, **settings)

    def code128(self, data: Union[str, bytes], **settings: Any) -> bytes:
        return self._feature(Feature.CODE128, data, **settings)

    def pdf417(self, data: Union[str, bytes], **settings: Any) -> bytes:
        return self._feature(Feature.PDF417, data, **settings)

    async def print_image(self, path: Union[str, Path]) -> bytes:
        """Decode a PNG file and append its raster commands. Non-blocking.

        Raises:
            UnsupportedFeatureError: Before touching the file, if unsupported.
            InvalidImageError: If the file is missing, not a PNG or corrupt.
        """
        encoder = resolve(Feature.IMAGE, self._printer_type)
        data = await asyncio.get_running_loop().run_in_executor(None, encoder, str(path))
        self.add(data)
        return data

    async def print_image_buffer(self, png: bytes) -> bytes:
        """Decode in-memory PNG data and append its raster commands."""
        encoder = resolve(Feature.IMAGE_BUFFER, self._printer_type)
        loop = asyncio.get_running_loop()
        decoded = await loop.run_in_executor(None, decode_png, bytes(png))
        data = await loop.run_in_executor(
            None, encoder, decoded.width, decoded.height, decoded.pixels
        )
        self.add(data)
        return data

    # -------------------------------------------------------------- transport

    def _require_transport(self) -> Transport:
        if self.transport is None:
            raise PrinterError("No transport configured for this printer")
        return self.transport

    async def execute(self) -> Any:
        """Send the buffer to the printer.

        The buffer is kept: executing again reprints the same job until
        :meth:`clear` is called.
        """
        transport = self._require_transport()
        logger.info("Executing print job (%s): %d bytes", self._printer_type.value, len(self._buffer))
        return await transport.execute(bytes(self._buffer))

    async def raw(self, data: bytes) -> Any:
        """Send bytes straight to the printer, bypassing the buffer."""
        return await self._require_transport().execute(bytes(data))

    async def is_printer_connected(self) -> bool:
        return await self._require_transport().is_printer_connected()
