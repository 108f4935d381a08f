#!/usr/bin/env python3
"""Print code page tables on the thermal printer.

Usage examples (from project root, with venv activated):

  python codepage_tables.py
      → prints the default "PC437_USA" table.

  python codepage_tables.py PC866_CYRILLIC2 WPC1252
      → prints one table per named code page.

  python codepage_tables.py --all --type star
      → prints every code page known for STAR printers.

The printer type, interface and width are taken from config.py / .env unless
overridden on the command line.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from escpos.constants import CTL_CR, CTL_FF, CTL_HT, CTL_LF, CTL_VT, ESC

import config
from const import PrinterType
from printer import ThermalPrinter
from transports import get_transport, transport_from_config

logger = logging.getLogger(__name__)

# Never send these as table cells
_CONTROL = {ESC, CTL_LF, CTL_FF, CTL_CR, CTL_HT, CTL_VT}


def setup_logging(log_file: str) -> None:
    """Rotating file log plus warnings on stderr."""
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    logging.basicConfig(handlers=[handler, console], level=logging.INFO)


def print_codepage(p: ThermalPrinter, name: str) -> None:
    """Append the upper half (0x80-0xFF) of one code page as a 8x16 grid."""
    p.set_text_double_height()
    p.println(name)
    p.set_text_normal()
    p.set_code_page(name)

    p.set_type_font_b()
    p.println("  " + "".join(f"{x:x}" for x in range(16)))
    p.set_type_font_a()
    for high in range(8, 16):
        p.print(f"{high:x} ")
        for low in range(16):
            byte = bytes((high * 16 + low,))
            p.add(b" " if byte in _CONTROL else byte)
        p.new_line()
    p.new_line()


def build_job(p: ThermalPrinter, names: list[str]) -> None:
    p.align_center()
    p.set_text_quad_area()
    p.println("Code page tables")
    p.set_text_normal()
    p.align_left()
    p.draw_line()
    for name in names:
        print_codepage(p, name)
    p.cut()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print code page tables on the printer.")
    parser.add_argument("codepages", nargs="*", help="Code page names (default: PC437_USA).")
    parser.add_argument("--all", action="store_true", help="Print every known code page.")
    parser.add_argument(
        "--type",
        choices=[t.value for t in PrinterType],
        default=None,
        help="Printer type (default from config.PRINTER_TYPE).",
    )
    parser.add_argument(
        "--interface",
        default=None,
        help="mock, tcp://host:port or serial:/dev/... (default from config).",
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    transport = get_transport(args.interface) if args.interface else transport_from_config()
    p = ThermalPrinter(
        printer_type=args.type or config.PRINTER_TYPE,
        transport=transport,
        width=config.PRINTER_WIDTH,
        line_char=config.LINE_CHARACTER,
    )
    names = list(p.code_pages) if args.all else (args.codepages or [p.code_pages.default.name])
    unknown = [n for n in names if n not in p.code_pages]
    if unknown:
        logger.error("Unknown code pages for %s: %s", p.printer_type.value, ", ".join(unknown))
        return 2

    build_job(p, names)
    await p.execute()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(config.LOG_FILE)
    return asyncio.run(run(args))


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass
