"""Adaptive single-byte text encoding for thermal printers.

Printers have no Unicode support: every non-ASCII character must be sent as a
byte of whichever code page the device currently has active. ``encode_text``
walks the text one Unicode scalar value at a time and, when the active page
cannot represent a character, switches to the first page of the table that
can, writing the switch command right before the character's byte.

The function is pure: the resulting active page is returned alongside the
bytes and it is up to the caller (the printer session) to keep it.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass

from codepages import CodePageTable

logger = logging.getLogger(__name__)

REPLACEMENT = b"?"

_COMBINING = re.compile(r"[\u0300-\u036f]")


@dataclass(frozen=True)
class EncodeResult:
    data: bytes
    code_page: str
    synced: bool = True


def remove_special_characters(text: str) -> str:
    """Decompose accented characters and drop the combining marks."""
    return _COMBINING.sub("", unicodedata.normalize("NFKD", text))


def _try_encode(char: str, encoding: str) -> bytes | None:
    try:
        return char.encode(encoding)
    except UnicodeEncodeError:
        return None
    except LookupError:
        logger.warning("Unknown encoding %r in code page table", encoding)
        return None


def encode_text(
    text: str,
    table: CodePageTable,
    code_page: str,
    normalize: bool = False,
    synced: bool = True,
) -> EncodeResult:
    """Encode ``text`` for the device starting from ``code_page``.

    Args:
        text: Text to encode.
        table: Code page table of the target printer family.
        code_page: Name of the page active on the device before the text.
        normalize: Strip accents (NFKD + combining mark removal) first.
        synced: Whether the device is known to have ``code_page`` active.
            When false, the page's switch command is written before the
            first non-ASCII byte.

    Returns:
        Encoded bytes, including any code page switch commands, the name of
        the page active after the last character and whether the device is
        known to have it active.

    Raises:
        UnknownCodePageError: If ``code_page`` is not in ``table``.
    """
    active = table[code_page]
    if normalize:
        text = remove_special_characters(text)

    out = bytearray()
    for char in text:
        if ord(char) < 0x80:
            out += char.encode("ascii")
            continue

        encoded = _try_encode(char, active.encoding)
        if encoded is not None:
            if not synced:
                out += active.command
                synced = True
            out += encoded
            continue

        for page in table.values():
            encoded = _try_encode(char, page.encoding)
            if encoded is not None:
                logger.debug("Switching code page %s -> %s for %r", active.name, page.name, char)
                active = page
                synced = True
                out += page.command
                out += encoded
                break
        else:
            logger.warning("No code page can encode %r, substituting '?'", char)
            out += REPLACEMENT

    return EncodeResult(bytes(out), active.name, synced)
