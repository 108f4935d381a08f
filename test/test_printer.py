"""Pytest tests for the ThermalPrinter session with a mock transport."""

import io
import logging
from unittest.mock import AsyncMock, patch

import pytest
from escpos.constants import HW_INIT, PAPER_FULL_CUT, PAPER_PART_CUT
from PIL import Image

from const import PrinterType
from errors import (
    InvalidImageError,
    PrinterError,
    UnknownCodePageError,
    UnsupportedFeatureError,
)
from printer import ThermalPrinter
from transports import MockTransport

EPSON_PC437 = b"\x1bt\x00"
STAR_PC437 = b"\x1b\x1dt\x01"


def png_bytes(size=(8, 2), color=(0, 0, 0, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def transport():
    return MockTransport()


@pytest.fixture
def epson_printer(transport):
    return ThermalPrinter(PrinterType.EPSON, transport=transport)


@pytest.fixture
def star_printer(transport):
    return ThermalPrinter(PrinterType.STAR, transport=transport)


class TestInit:
    """Tests for ThermalPrinter.__init__."""

    def test_defaults(self, epson_printer):
        """A new session has width 48, PC437 and an empty buffer."""
        assert epson_printer.get_width() == 48
        assert epson_printer.code_page == "PC437_USA"
        assert epson_printer.get_buffer() == b""
        assert epson_printer.remove_special_characters is False

    def test_zero_width_uses_default(self):
        """Width 0 falls back to the default width."""
        assert ThermalPrinter(width=0).get_width() == 48

    def test_negative_width_rejected(self):
        """Negative widths raise ValueError."""
        with pytest.raises(ValueError):
            ThermalPrinter(width=-5)

    def test_printer_type_from_string(self):
        """Printer type strings are case insensitive."""
        p = ThermalPrinter("STAR")
        assert p.printer_type is PrinterType.STAR

    def test_unknown_printer_type(self):
        """Unknown printer types are rejected."""
        with pytest.raises(ValueError, match="Unknown printer type"):
            ThermalPrinter("citizen")

    def test_from_config(self, transport):
        """from_config reads every session setting from config."""
        with patch("printer.config") as cfg:
            cfg.PRINTER_TYPE = "star"
            cfg.PRINTER_WIDTH = 32
            cfg.REMOVE_SPECIAL_CHARACTERS = True
            cfg.LINE_CHARACTER = b"="
            p = ThermalPrinter.from_config(transport=transport)
        assert p.printer_type is PrinterType.STAR
        assert p.get_width() == 32
        assert p.remove_special_characters is True
        assert p.line_char == b"="
        assert p.transport is transport


class TestBuffer:
    """Text, raw bytes and buffer management."""

    def test_print_and_println(self, epson_printer):
        """print appends text, println adds a line feed."""
        epson_printer.print("Hello")
        epson_printer.println(" world")
        assert epson_printer.get_buffer() == b"Hello world\n"
        assert epson_printer.get_text() == "Hello world\n"

    def test_print_none_appends_nothing(self, epson_printer):
        """None prints as empty text."""
        epson_printer.print(None)
        assert epson_printer.get_buffer() == b""

    def test_print_tracks_code_page(self, epson_printer):
        """The switch command is written once per page change."""
        epson_printer.print("Ж")
        assert epson_printer.code_page == "PC866_CYRILLIC2"
        epson_printer.print("Ж")
        assert epson_printer.get_buffer() == b"\x1bt\x11\x86\x86"

    def test_remove_special_characters(self, transport):
        """Accents are stripped when the session is configured to."""
        p = ThermalPrinter(transport=transport, remove_special_characters=True)
        p.print("Café")
        assert p.get_buffer() == b"Cafe"

    def test_add_is_raw(self, epson_printer):
        """add appends bytes untouched."""
        epson_printer.add(b"\x1b@")
        assert epson_printer.get_buffer() == b"\x1b@"

    def test_set_buffer_and_clear(self, epson_printer):
        """set_buffer replaces the buffer and clear empties it."""
        epson_printer.set_buffer(b"abc")
        assert epson_printer.get_buffer() == b"abc"
        epson_printer.clear()
        assert epson_printer.get_buffer() == b""

    def test_clear_keeps_code_page(self, epson_printer):
        """clear leaves the active code page alone."""
        epson_printer.print("Ж")
        epson_printer.clear()
        assert epson_printer.code_page == "PC866_CYRILLIC2"
        epson_printer.print("Ж")
        assert epson_printer.get_buffer() == b"\x86"

    def test_new_line_and_vertical_tab(self, epson_printer):
        """Line feed and vertical tab commands."""
        epson_printer.new_line()
        epson_printer.print_vertical_tab()
        assert epson_printer.get_buffer() == b"\n\x0b"


class TestCodePage:
    """Tests for set_code_page and the device code page."""

    def test_set_code_page_epson(self, epson_printer):
        """EPSON pages are selected with ESC t n."""
        epson_printer.set_code_page("PC866_CYRILLIC2")
        assert epson_printer.get_buffer() == b"\x1bt\x11"
        assert epson_printer.code_page == "PC866_CYRILLIC2"

    def test_set_code_page_star(self, star_printer):
        """STAR pages are selected with ESC GS t n."""
        star_printer.set_code_page("WPC1252")
        assert star_printer.get_buffer() == b"\x1b\x1dt\x20"

    def test_unknown_code_page_leaves_state(self, epson_printer):
        """An unknown page raises and changes nothing."""
        epson_printer.print("x")
        with pytest.raises(UnknownCodePageError) as exc_info:
            epson_printer.set_code_page("KLINGON")
        assert "KLINGON" in str(exc_info.value)
        assert isinstance(exc_info.value, KeyError)
        assert epson_printer.code_page == "PC437_USA"
        assert epson_printer.get_buffer() == b"x"

    def test_star_lacks_epson_only_pages(self, star_printer):
        """Pages missing from the STAR table are unknown there."""
        with pytest.raises(UnknownCodePageError):
            star_printer.set_code_page("KZ1048_KAZAKHSTAN")

    def test_ascii_does_not_select_page(self, epson_printer):
        """Plain ASCII never writes a switch command."""
        epson_printer.print("abc")
        assert epson_printer.get_buffer() == b"abc"

    def test_first_non_ascii_selects_default_page(self, epson_printer):
        """The default page is written before the first byte that needs it."""
        epson_printer.print("aé")
        epson_printer.print("é")
        assert epson_printer.get_buffer() == b"a" + EPSON_PC437 + b"\x82\x82"

    def test_first_non_ascii_selects_default_page_star(self, star_printer):
        """STAR writes its own PC437 switch command."""
        star_printer.print("é")
        assert star_printer.get_buffer() == STAR_PC437 + b"\x82"

    def test_explicit_default_page_is_not_repeated(self, epson_printer):
        """After set_code_page the page is known to the device."""
        epson_printer.set_code_page("PC437_USA")
        epson_printer.print("é")
        assert epson_printer.get_buffer() == EPSON_PC437 + b"\x82"

    def test_substituted_character_leaves_page_unknown(self, epson_printer):
        """A '?' substitute does not count as selecting a page."""
        epson_printer.print("\U0001f600")
        epson_printer.print("é")
        assert epson_printer.get_buffer() == b"?" + EPSON_PC437 + b"\x82"


class TestStyles:
    """Style commands differ per printer family."""

    @pytest.mark.parametrize(
        "method, args, expected",
        [
            ("bold", (True,), b"\x1bE\x01"),
            ("bold", (False,), b"\x1bE\x00"),
            ("underline", (True,), b"\x1b-\x01"),
            ("underline_thick", (True,), b"\x1b-\x02"),
            ("underline", (False,), b"\x1b-\x00"),
            ("invert", (True,), b"\x1dB\x01"),
            ("upside_down", (True,), b"\x1b{\x01"),
            ("align_center", (), b"\x1ba\x01"),
            ("align_right", (), b"\x1ba\x02"),
            ("set_type_font_b", (), b"\x1bM\x01"),
            ("set_text_double_height", (), b"\x1b!\x10"),
            ("set_text_quad_area", (), b"\x1b!\x30"),
        ],
    )
    def test_epson_styles(self, epson_printer, method, args, expected):
        """EPSON style methods append ESC/POS commands."""
        getattr(epson_printer, method)(*args)
        assert epson_printer.get_buffer() == expected

    @pytest.mark.parametrize(
        "method, args, expected",
        [
            ("bold", (True,), b"\x1bE"),
            ("bold", (False,), b"\x1bF"),
            ("invert", (True,), b"\x1b4"),
            ("align_center", (), b"\x1b\x1da\x01"),
            ("set_text_double_width", (), b"\x1bi\x00\x01"),
            ("upside_down", (True,), b"\x0f"),
        ],
    )
    def test_star_styles(self, star_printer, method, args, expected):
        """STAR style methods append Line Mode commands."""
        getattr(star_printer, method)(*args)
        assert star_printer.get_buffer() == expected


class TestFeatures:
    """Capability dispatch through the session."""

    def test_epson_cut(self, epson_printer):
        """Full cut feeds, cuts and reinitializes."""
        epson_printer.cut()
        assert epson_printer.get_buffer() == b"\x0b\x0b" + PAPER_FULL_CUT + HW_INIT

    def test_epson_partial_cut(self, epson_printer):
        """Partial cut uses the partial cut command."""
        epson_printer.partial_cut()
        assert epson_printer.get_buffer() == b"\x0b\x0b" + PAPER_PART_CUT + HW_INIT

    def test_star_cut(self, star_printer):
        """STAR cut uses ESC d 2."""
        star_printer.cut()
        assert star_printer.get_buffer() == b"\x0b\x0b\x1bd\x02\x1b@"

    def test_cut_resets_code_page(self, epson_printer):
        """After a cut the next Cyrillic character switches again."""
        epson_printer.print("Ж")
        epson_printer.cut()
        assert epson_printer.code_page == "PC437_USA"
        epson_printer.clear()
        epson_printer.print("Ж")
        assert epson_printer.get_buffer() == b"\x1bt\x11\x86"

    def test_cut_selects_default_page_again(self, epson_printer):
        """After a cut the default page is written before its next use."""
        epson_printer.set_code_page("WPC1252")
        epson_printer.cut()
        epson_printer.clear()
        epson_printer.print("é")
        assert epson_printer.get_buffer() == EPSON_PC437 + b"\x82"

    def test_partial_cut_selects_default_page_again(self, star_printer):
        """Partial cut resets the device page like a full cut."""
        star_printer.print("é")
        star_printer.partial_cut()
        star_printer.clear()
        star_printer.print("é")
        assert star_printer.get_buffer() == STAR_PC437 + b"\x82"

    def test_beep_epson(self, epson_printer):
        """EPSON beep command."""
        epson_printer.beep()
        assert epson_printer.get_buffer() == b"\x1bB\x03\x02"

    def test_beep_star_unsupported(self, star_printer):
        """STAR beep raises before touching the buffer."""
        star_printer.print("x")
        with pytest.raises(UnsupportedFeatureError) as exc_info:
            star_printer.beep()
        assert exc_info.value.printer_type is PrinterType.STAR
        assert "Beep not supported on 'star'" in str(exc_info.value)
        assert star_printer.get_buffer() == b"x"

    def test_barcode_star_unsupported(self, star_printer):
        """STAR has no generic barcode command."""
        with pytest.raises(UnsupportedFeatureError):
            star_printer.print_barcode("123456")
        assert star_printer.get_buffer() == b""

    def test_barcode_epson(self, epson_printer):
        """Barcode bytes are appended and returned."""
        data = epson_printer.print_barcode("123")
        assert data.endswith(b"\x1dkI\x05{B123")
        assert epson_printer.get_buffer() == data

    def test_code128_epson_unsupported(self, epson_printer):
        """Code128 is a STAR-only feature."""
        with pytest.raises(UnsupportedFeatureError):
            epson_printer.code128("123")

    def test_maxicode_star_unsupported(self, star_printer):
        """MaxiCode is an EPSON-only feature."""
        with pytest.raises(UnsupportedFeatureError):
            star_printer.maxi_code("123")

    def test_code128_star(self, star_printer):
        """STAR Code128 with default settings."""
        star_printer.code128("123")
        assert star_printer.get_buffer() == b"\x1bb642(123\x1e"

    def test_qr_both_families(self, epson_printer, star_printer):
        """Both families print QR codes with their own commands."""
        assert epson_printer.print_qr("hi").startswith(b"\x1d(k")
        assert star_printer.print_qr("hi").startswith(b"\x1b\x1dy")

    def test_qr_settings_passed_through(self, epson_printer):
        """Keyword settings reach the QR encoder."""
        data = epson_printer.print_qr("hi", cell_size=6, correction="H")
        assert b"\x1d(k\x03\x001C\x06" in data
        assert b"\x1d(k\x03\x001E3" in data

    def test_invalid_settings_append_nothing(self, epson_printer):
        """Out of range settings raise and leave the buffer alone."""
        with pytest.raises(ValueError):
            epson_printer.print_qr("hi", cell_size=99)
        assert epson_printer.get_buffer() == b""

    def test_cash_drawer(self, epson_printer, star_printer):
        """Cash drawer kick for both families."""
        epson_printer.open_cash_drawer()
        star_printer.open_cash_drawer()
        assert epson_printer.get_buffer().startswith(b"\x1bp")
        assert star_printer.get_buffer() == b"\x07"


@pytest.mark.asyncio
class TestImages:
    """Asynchronous image printing."""

    async def test_print_image_file(self, epson_printer, tmp_path):
        """EPSON prints a PNG file as GS v 0 raster."""
        path = tmp_path / "logo.png"
        path.write_bytes(png_bytes())
        data = await epson_printer.print_image(path)
        assert b"\x1dv0" in data
        assert epson_printer.get_buffer() == data

    async def test_print_image_star(self, star_printer, tmp_path):
        """STAR prints a PNG file in raster mode, one command per row."""
        path = tmp_path / "logo.png"
        path.write_bytes(png_bytes())
        data = await star_printer.print_image(str(path))
        assert data.startswith(b"\x1b*rR\x1b*rA")
        assert data.count(b"b\x01\x00\xff") == 2

    async def test_missing_file(self, epson_printer, tmp_path):
        """A missing file raises InvalidImageError."""
        with pytest.raises(InvalidImageError, match="not found"):
            await epson_printer.print_image(tmp_path / "missing.png")
        assert epson_printer.get_buffer() == b""

    async def test_non_png_file(self, epson_printer, tmp_path):
        """Only .png files are accepted."""
        path = tmp_path / "logo.jpg"
        path.write_bytes(b"not really a jpeg")
        with pytest.raises(InvalidImageError, match="only PNG"):
            await epson_printer.print_image(path)

    async def test_print_image_buffer(self, star_printer):
        """In-memory PNG data is decoded and printed."""
        data = await star_printer.print_image_buffer(png_bytes(color=(255, 255, 255, 255)))
        assert data.count(b"b\x01\x00\x00") == 2
        assert star_printer.get_buffer() == data

    async def test_print_image_buffer_garbage(self, epson_printer):
        """Undecodable data raises and appends nothing."""
        with pytest.raises(InvalidImageError):
            await epson_printer.print_image_buffer(b"\x89PNG broken")
        assert epson_printer.get_buffer() == b""


@pytest.mark.asyncio
class TestTransport:
    """execute / raw / is_printer_connected."""

    async def test_execute_sends_buffer(self, epson_printer, transport, caplog):
        """execute sends the buffer and logs its size."""
        caplog.set_level(logging.INFO)
        epson_printer.println("Hello")
        result = await epson_printer.execute()
        assert result == 6
        assert transport.sent == [b"Hello\n"]
        assert "Executing print job (epson): 6 bytes" in caplog.text

    async def test_execute_does_not_clear(self, epson_printer, transport):
        """Executing twice sends the same job twice."""
        epson_printer.print("A")
        await epson_printer.execute()
        await epson_printer.execute()
        assert transport.sent == [b"A", b"A"]
        epson_printer.clear()
        await epson_printer.execute()
        assert transport.sent[-1] == b""

    async def test_transport_error_propagates(self, epson_printer):
        """Transport errors reach the caller unchanged."""
        epson_printer.transport = AsyncMock()
        epson_printer.transport.execute.side_effect = ConnectionRefusedError("offline")
        with pytest.raises(ConnectionRefusedError):
            await epson_printer.execute()

    async def test_execute_without_transport(self):
        """A session without transport cannot execute."""
        p = ThermalPrinter()
        with pytest.raises(PrinterError, match="No transport"):
            await p.execute()

    async def test_raw_bypasses_buffer(self, epson_printer, transport):
        """raw sends bytes without touching the buffer."""
        await epson_printer.raw(b"\x1b@")
        assert transport.sent == [b"\x1b@"]
        assert epson_printer.get_buffer() == b""

    async def test_is_printer_connected(self, epson_printer):
        """The mock transport is always online."""
        assert await epson_printer.is_printer_connected() is True
