"""Helpers for converting overlay colors between ARGB integers and QColor."""
from __future__ import annotations

from typing import Any, Optional

from PyQt6.QtGui import QColor

SPLIT_COMPLEMENTARY_DEGREES = 210


def argb_to_qcolor(argb: int) -> QColor:
    return QColor.fromRgba(int(argb) & 0xFFFFFFFF)


def qcolor_to_argb(color: QColor) -> int:
    return int(color.rgba()) & 0xFFFFFFFF


def split_complementary(color: QColor) -> QColor:
    """Rotate the hue by 210 degrees (complement plus 30), keeping saturation and value.

    The result is opaque. Achromatic colors report no hue and are treated as hue 0.
    """
    hue, saturation, value, _alpha = color.getHsvF()
    if hue is None or hue < 0.0:
        hue = 0.0
    degrees = (hue * 360.0 + SPLIT_COMPLEMENTARY_DEGREES) % 360.0
    return QColor.fromHsvF(degrees / 360.0, saturation, value, 1.0)


def parse_color(value: Any, fallback: Optional[int] = None) -> Optional[int]:
    """Coerce a settings value into an ARGB integer.

    Accepts ints, ``"0xAARRGGBB"``, ``"#AARRGGBB"``, ``"#RRGGBB"`` and Qt color names.
    """
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value & 0xFFFFFFFF
    try:
        text = str(value).strip()
    except Exception:
        return fallback
    if not text:
        return fallback
    if text.lower().startswith("0x"):
        try:
            return int(text, 16) & 0xFFFFFFFF
        except ValueError:
            return fallback
    color = QColor(text)
    if not color.isValid():
        return fallback
    return qcolor_to_argb(color)
