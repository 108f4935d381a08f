"""Per-family table of fixed command sequences."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandSet:
    """Fixed text and control commands of one printer family."""

    line_feed: bytes
    vertical_tab: bytes
    hw_init: bytes
    bold_on: bytes
    bold_off: bytes
    underline_on: bytes
    underline_thick_on: bytes
    underline_off: bytes
    invert_on: bytes
    invert_off: bytes
    upside_down_on: bytes
    upside_down_off: bytes
    align_left: bytes
    align_center: bytes
    align_right: bytes
    font_a: bytes
    font_b: bytes
    text_normal: bytes
    text_double_height: bytes
    text_double_width: bytes
    text_quad_area: bytes
    full_cut: bytes
    partial_cut: bytes
