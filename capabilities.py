"""Which device feature is available on which printer family.

``CAPABILITIES`` holds an entry for every (feature, printer type) pair: the
device encoder producing the feature's bytes, or :data:`UNSUPPORTED` where
the family intentionally lacks it. New features must be added for every
family.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Final, Mapping, Tuple, Union

import epson
import star
from const import PrinterType
from errors import UnsupportedFeatureError


class Feature(str, Enum):
    CUT = "Cut"
    PARTIAL_CUT = "Partial cut"
    BEEP = "Beep"
    CASH_DRAWER = "Cash drawer"
    QR = "QR"
    BARCODE = "Barcode"
    MAXICODE = "MaxiCode"
    CODE128 = "Code128"
    PDF417 = "PDF417"
    IMAGE = "Image print"
    IMAGE_BUFFER = "Image buffer print"


class _Unsupported:
    def __repr__(self) -> str:
        return "UNSUPPORTED"


UNSUPPORTED: Final = _Unsupported()

Encoder = Callable[..., bytes]

CAPABILITIES: Mapping[Tuple[Feature, PrinterType], Union[Encoder, _Unsupported]] = {
    (Feature.CUT, PrinterType.EPSON): epson.cut,
    (Feature.CUT, PrinterType.STAR): star.cut,
    (Feature.PARTIAL_CUT, PrinterType.EPSON): epson.partial_cut,
    (Feature.PARTIAL_CUT, PrinterType.STAR): star.partial_cut,
    (Feature.BEEP, PrinterType.EPSON): epson.beep,
    (Feature.BEEP, PrinterType.STAR): UNSUPPORTED,
    (Feature.CASH_DRAWER, PrinterType.EPSON): epson.open_cash_drawer,
    (Feature.CASH_DRAWER, PrinterType.STAR): star.open_cash_drawer,
    (Feature.QR, PrinterType.EPSON): epson.qr,
    (Feature.QR, PrinterType.STAR): star.qr,
    (Feature.BARCODE, PrinterType.EPSON): epson.barcode,
    (Feature.BARCODE, PrinterType.STAR): UNSUPPORTED,
    (Feature.MAXICODE, PrinterType.EPSON): epson.maxi_code,
    (Feature.MAXICODE, PrinterType.STAR): UNSUPPORTED,
    (Feature.CODE128, PrinterType.EPSON): UNSUPPORTED,
    (Feature.CODE128, PrinterType.STAR): star.code128,
    (Feature.PDF417, PrinterType.EPSON): epson.pdf417,
    (Feature.PDF417, PrinterType.STAR): star.pdf417,
    (Feature.IMAGE, PrinterType.EPSON): epson.image,
    (Feature.IMAGE, PrinterType.STAR): star.image,
    (Feature.IMAGE_BUFFER, PrinterType.EPSON): epson.image_buffer,
    (Feature.IMAGE_BUFFER, PrinterType.STAR): star.image_buffer,
}


def resolve(feature: Feature, printer_type: PrinterType) -> Encoder:
    """Return the encoder for ``feature`` on ``printer_type``.

    Raises:
        UnsupportedFeatureError: If the family has no such feature.
    """
    encoder = CAPABILITIES.get((feature, printer_type), UNSUPPORTED)
    if isinstance(encoder, _Unsupported):
        raise UnsupportedFeatureError(feature, printer_type)
    return encoder


def supports(feature: Feature, printer_type: PrinterType) -> bool:
    return not isinstance(CAPABILITIES.get((feature, printer_type), UNSUPPORTED), _Unsupported)
