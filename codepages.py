"""Code page registry for EPSON (ESC/POS) and STAR (Line Mode) printers.

Each printer family gets one ordered table mapping a code page name to the
command that activates it on the device and the Python codec that produces
its bytes. Order matters: the encoder walks the table front to back when the
active page cannot represent a character, so common Latin pages come first.

Tables are built once at import and shared read-only by every session.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Iterable

from escpos.constants import CODEPAGE_CHANGE, ESC, GS

from const import PrinterType
from errors import UnknownCodePageError

# ESC GS t n
STAR_CODEPAGE_CHANGE = ESC + GS + b"t"


@dataclass(frozen=True)
class CodePage:
    """Single entry of a code page table."""

    name: str
    command: bytes
    encoding: str


class CodePageTable(Mapping[str, CodePage]):
    """Ordered, read-only mapping of code page name to :class:`CodePage`."""

    def __init__(self, pages: Iterable[CodePage]) -> None:
        self._pages: dict[str, CodePage] = {}
        for page in pages:
            self._pages[page.name] = page
        if not self._pages:
            raise ValueError("Code page table must not be empty")

    def __getitem__(self, name: str) -> CodePage:
        try:
            return self._pages[name]
        except KeyError:
            raise UnknownCodePageError(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    @property
    def default(self) -> CodePage:
        """First entry; active when a session starts."""
        return next(iter(self._pages.values()))


def _epson(name: str, number: int, encoding: str) -> CodePage:
    return CodePage(name, CODEPAGE_CHANGE + bytes((number,)), encoding)


def _star(name: str, number: int, encoding: str) -> CodePage:
    return CodePage(name, STAR_CODEPAGE_CHANGE + bytes((number,)), encoding)


EPSON_CODE_PAGES = CodePageTable(
    [
        _epson("PC437_USA", 0, "cp437"),
        _epson("PC850_MULTILINGUAL", 2, "cp850"),
        _epson("PC860_PORTUGUESE", 3, "cp860"),
        _epson("PC863_CANADIAN_FRENCH", 4, "cp863"),
        _epson("PC865_NORDIC", 5, "cp865"),
        _epson("PC857_TURKISH", 13, "cp857"),
        _epson("PC737_GREEK", 14, "cp737"),
        _epson("ISO8859_7_GREEK", 15, "iso8859_7"),
        _epson("WPC1252", 16, "cp1252"),
        _epson("PC866_CYRILLIC2", 17, "cp866"),
        _epson("PC852_LATIN2", 18, "cp852"),
        _epson("PC858_EURO", 19, "cp858"),
        _epson("WPC775_BALTIC_RIM", 33, "cp775"),
        _epson("PC855_CYRILLIC", 34, "cp855"),
        _epson("PC861_ICELANDIC", 35, "cp861"),
        _epson("PC862_HEBREW", 36, "cp862"),
        _epson("PC864_ARABIC", 37, "cp864"),
        _epson("PC869_GREEK", 38, "cp869"),
        _epson("ISO8859_2_LATIN2", 39, "iso8859_2"),
        _epson("ISO8859_15_LATIN9", 40, "iso8859_15"),
        _epson("PC1125_UKRAINIAN", 44, "cp1125"),
        _epson("WPC1250_LATIN2", 45, "cp1250"),
        _epson("WPC1251_CYRILLIC", 46, "cp1251"),
        _epson("WPC1253_GREEK", 47, "cp1253"),
        _epson("WPC1254_TURKISH", 48, "cp1254"),
        _epson("WPC1255_HEBREW", 49, "cp1255"),
        _epson("WPC1256_ARABIC", 50, "cp1256"),
        _epson("WPC1257_BALTIC_RIM", 51, "cp1257"),
        _epson("WPC1258_VIETNAMESE", 52, "cp1258"),
        _epson("KZ1048_KAZAKHSTAN", 53, "kz1048"),
    ]
)

STAR_CODE_PAGES = CodePageTable(
    [
        _star("PC437_USA", 1, "cp437"),
        _star("PC858_EURO", 4, "cp858"),
        _star("PC852_LATIN2", 5, "cp852"),
        _star("PC860_PORTUGUESE", 6, "cp860"),
        _star("PC861_ICELANDIC", 7, "cp861"),
        _star("PC863_CANADIAN_FRENCH", 8, "cp863"),
        _star("PC865_NORDIC", 9, "cp865"),
        _star("PC866_CYRILLIC2", 10, "cp866"),
        _star("PC855_CYRILLIC", 11, "cp855"),
        _star("PC857_TURKISH", 12, "cp857"),
        _star("PC862_HEBREW", 13, "cp862"),
        _star("PC864_ARABIC", 14, "cp864"),
        _star("PC737_GREEK", 15, "cp737"),
        _star("PC869_GREEK", 17, "cp869"),
        _star("WPC1252", 32, "cp1252"),
        _star("WPC1250_LATIN2", 33, "cp1250"),
        _star("WPC1251_CYRILLIC", 34, "cp1251"),
    ]
)

CODE_PAGE_TABLES: Mapping[PrinterType, CodePageTable] = {
    PrinterType.EPSON: EPSON_CODE_PAGES,
    PrinterType.STAR: STAR_CODE_PAGES,
}


def get_code_page_table(printer_type: PrinterType) -> CodePageTable:
    """Return the shared code page table for a printer family."""
    return CODE_PAGE_TABLES[printer_type]
