"""Process-wide checkerboard mask tiled over every composite."""
from __future__ import annotations

from typing import Optional

from PyQt6.QtGui import QImage

GRID_SIZE_PX = 512
_FOREGROUND = 0xFF
_TRANSPARENT = 0x00


def _checkerboard_bytes(size: int) -> bytes:
    # Cell (i, j) is foreground iff i % 2 == j % 2, one pixel per cell.
    even_row = bytes([_FOREGROUND, _TRANSPARENT]) * (size // 2) + bytes([_FOREGROUND]) * (size % 2)
    odd_row = bytes([_TRANSPARENT, _FOREGROUND]) * (size // 2) + bytes([_TRANSPARENT]) * (size % 2)
    rows = (even_row + odd_row) * (size // 2)
    if size % 2:
        rows += even_row
    return rows


class GridPatternGenerator:
    """Lazily builds a single-channel ``size`` x ``size`` checkerboard.

    The pattern is built on the first call to :meth:`ensure_built` and the same
    instance is returned afterwards. Callers must treat it as read-only.
    """

    def __init__(self, size: int = GRID_SIZE_PX) -> None:
        self._size = int(size)
        self._pattern: Optional[QImage] = None

    @property
    def size(self) -> int:
        return self._size

    @property
    def is_built(self) -> bool:
        return self._pattern is not None

    def ensure_built(self) -> QImage:
        if self._pattern is not None:
            return self._pattern
        size = self._size
        data = _checkerboard_bytes(size)
        # QImage wraps the buffer without owning it; copy() detaches into Qt-owned memory.
        wrapped = QImage(data, size, size, size, QImage.Format.Format_Alpha8)
        self._pattern = wrapped.copy()
        return self._pattern


_SHARED_GENERATOR = GridPatternGenerator()


def grid_pattern() -> QImage:
    """Return the shared grid pattern, building it on first use."""
    return _SHARED_GENERATOR.ensure_built()
