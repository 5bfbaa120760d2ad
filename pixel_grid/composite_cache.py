"""Cache of grid-overlaid composites keyed by the identity of the original bitmap."""
from __future__ import annotations

import weakref
from typing import Callable, Dict, Optional, Tuple, Union

from PyQt6.QtCore import QPoint
from PyQt6.QtGui import QColor, QImage, QPainter, QPixmap

from pixel_grid.color_utils import argb_to_qcolor, qcolor_to_argb, split_complementary  # type: ignore
from pixel_grid.grid_pattern import grid_pattern  # type: ignore
from pixel_grid.logging_utils import get_logger  # type: ignore

Bitmap = Union[QImage, QPixmap]

DEFAULT_COLOR = 0x88FF0088
_LOGGER = get_logger("Cache")


def _tinted_tile(pattern: QImage, color: QColor) -> QImage:
    """Return the pattern painted through ``color``: tinted where the mask is set, clear elsewhere."""
    tile = QImage(pattern.size(), QImage.Format.Format_ARGB32_Premultiplied)
    tile.fill(color)
    painter = QPainter(tile)
    try:
        painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_DestinationIn)
        painter.drawImage(QPoint(0, 0), pattern)
    finally:
        painter.end()
    return tile


class OverlayCompositeCache:
    """Maps each original bitmap to a copy with the grid pattern painted on top.

    Originals are referenced weakly and by identity: an entry disappears as soon
    as its original is garbage collected, while the composite itself is owned by
    the cache. Changing the color drops every entry because composites embed it.

    Not thread-safe; drive it from the thread that owns the painter.
    """

    def __init__(
        self,
        color: int = DEFAULT_COLOR,
        pattern_source: Callable[[], QImage] = grid_pattern,
    ) -> None:
        self._entries: Dict[int, Tuple[weakref.ref, Bitmap]] = {}
        self._pattern_source = pattern_source
        self._tile: Optional[QImage] = None
        self._color = argb_to_qcolor(DEFAULT_COLOR)
        self._label_color = split_complementary(self._color)
        self.set_color(color)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, original: object) -> bool:
        entry = self._entries.get(id(original))
        return entry is not None and entry[0]() is original

    def color(self) -> int:
        return qcolor_to_argb(self._color)

    def qcolor(self) -> QColor:
        return QColor(self._color)

    def label_color(self) -> QColor:
        return QColor(self._label_color)

    def set_color(self, color: int) -> None:
        self.clear()
        self._color = argb_to_qcolor(color)
        self._label_color = split_complementary(self._color)
        self._tile = None

    def clear(self) -> None:
        if self._entries:
            _LOGGER.debug("Dropping %d cached grid composite(s)", len(self._entries))
        self._entries.clear()

    def get_or_build(self, original: Bitmap) -> Bitmap:
        key = id(original)
        entry = self._entries.get(key)
        if entry is not None and entry[0]() is original:
            return entry[1]

        if isinstance(original, QPixmap):
            composite: Bitmap = QPixmap.fromImage(self._composite_image(original.toImage()))
        else:
            composite = self._composite_image(original)

        ref = weakref.ref(original, self._make_reaper(key))
        self._entries[key] = (ref, composite)
        _LOGGER.debug(
            "Built grid composite %dx%d (cached=%d)",
            composite.width(),
            composite.height(),
            len(self._entries),
        )
        return composite

    def _make_reaper(self, key: int) -> Callable[[weakref.ref], None]:
        entries = self._entries

        def _reap(ref: weakref.ref) -> None:
            # The id may have been reused by a newer key; only drop our own entry.
            current = entries.get(key)
            if current is not None and current[0] is ref:
                del entries[key]

        return _reap

    def _grid_tile(self) -> QImage:
        if self._tile is None:
            self._tile = _tinted_tile(self._pattern_source(), self._color)
        return self._tile

    def _composite_image(self, original: QImage) -> QImage:
        width = original.width()
        height = original.height()
        composite = QImage(width, height, QImage.Format.Format_ARGB32)
        composite.fill(0)
        tile = self._grid_tile()
        tile_width = tile.width()
        tile_height = tile.height()
        painter = QPainter(composite)
        try:
            # Native pixels only; the original's device-pixel ratio must not rescale the copy.
            source = QImage(original)
            source.setDevicePixelRatio(1.0)
            painter.drawImage(QPoint(0, 0), source)
            for left in range(0, width, tile_width):
                for top in range(0, height, tile_height):
                    painter.drawImage(QPoint(left, top), tile)
        finally:
            painter.end()
        composite.setDevicePixelRatio(original.devicePixelRatio())
        return composite
