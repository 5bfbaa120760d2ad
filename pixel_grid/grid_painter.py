"""Painter wrapper that overlays a pixel grid on every bitmap it draws."""
from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple, Union

from PyQt6.QtCore import QRect, QRectF
from PyQt6.QtGui import QImage, QPixmap

from pixel_grid.composite_cache import DEFAULT_COLOR, OverlayCompositeCache  # type: ignore
from pixel_grid.delegate_painter import DelegatePainter  # type: ignore
from pixel_grid.display_metrics import DisplayMetrics  # type: ignore
from pixel_grid.logging_utils import get_logger  # type: ignore
from pixel_grid.scale_annotator import TEXT_SIZE_DP, ScaleAnnotator  # type: ignore

_LOGGER = get_logger("Painter")

Bitmap = Union[QImage, QPixmap]
_Rect = Tuple[float, float, float, float]


def _bitmap_index(args: Sequence[Any], kind: type) -> int:
    for index, value in enumerate(args):
        if isinstance(value, kind):
            return index
    raise TypeError(f"expected a {kind.__name__} argument, got {[type(arg).__name__ for arg in args]}")


def _target_rect(args: Sequence[Any]) -> Optional[_Rect]:
    """Destination rectangle from the arguments preceding the bitmap, if any."""
    if len(args) == 1 and isinstance(args[0], (QRect, QRectF)):
        rect = args[0]
        return float(rect.left()), float(rect.top()), float(rect.width()), float(rect.height())
    if len(args) == 4:
        x, y, width, height = args
        return float(x), float(y), float(width), float(height)
    # QPoint/QPointF or (x, y): only a position, drawn at the source's own size.
    return None


def _source_rect(args: Sequence[Any], bitmap: Bitmap) -> _Rect:
    """Source rectangle in bitmap pixels; the whole bitmap when none is given."""
    sx, sy = 0.0, 0.0
    sw, sh = float(bitmap.width()), float(bitmap.height())
    if args:
        first = args[0]
        if isinstance(first, (QRect, QRectF)):
            sx, sy = float(first.left()), float(first.top())
            sw, sh = float(first.width()), float(first.height())
        elif len(args) >= 4 and not isinstance(first, bool):
            sx, sy, sw, sh = (float(value) for value in args[:4])
        # Otherwise only conversion flags follow the bitmap.
    # Non-positive sizes mean "up to the right/bottom edge".
    if sw <= 0:
        sw = bitmap.width() - sx
    if sh <= 0:
        sh = bitmap.height() - sy
    return sx, sy, sw, sh


def draw_geometry(
    bitmap: Bitmap,
    target_args: Sequence[Any],
    source_args: Sequence[Any],
) -> Optional[Tuple[float, float, int, int]]:
    """Return ``(input_scale_x, input_scale_y, offset_x, offset_y)`` for a draw call.

    An unspecified source spans the whole bitmap. A point-positioned draw
    renders the source region at its own size, so its hints are 1 and it has
    no offset. Target sizes are logical and are compared with the source in
    bitmap pixels through the bitmap's device-pixel ratio. Returns None when
    the source region is empty and nothing gets drawn.
    """
    _, _, src_width, src_height = _source_rect(source_args, bitmap)
    if src_width <= 0 or src_height <= 0:
        return None
    target = _target_rect(target_args)
    if target is None:
        return 1.0, 1.0, 0, 0
    ratio = bitmap.devicePixelRatio()
    left, top, dst_width, dst_height = target
    # Negative target sizes fall back to the source size, as QPainter does.
    dst_width = src_width if dst_width < 0 else dst_width * ratio
    dst_height = src_height if dst_height < 0 else dst_height * ratio
    return dst_width / src_width, dst_height / src_height, int(left), int(top)


class GridOverlayPainter(DelegatePainter):
    """Draws every ``QImage``/``QPixmap`` through a cached grid composite.

    Every ``drawImage`` and ``drawPixmap`` overload is intercepted. Tiled and
    fragment pixmap draws (``drawTiledPixmap``, ``drawPixmapFragments``) and all
    other QPainter calls are forwarded to the delegate untouched.

    When the scale overlay is enabled, the effective on-screen scale of each
    bitmap is drawn over it after the composite.
    """

    def __init__(
        self,
        metrics: Optional[DisplayMetrics] = None,
        *,
        color: int = DEFAULT_COLOR,
        text_size_dp: float = TEXT_SIZE_DP,
        cache: Optional[OverlayCompositeCache] = None,
    ) -> None:
        super().__init__()
        self._cache = cache if cache is not None else OverlayCompositeCache()
        self._annotator = ScaleAnnotator(metrics, text_size_dp=text_size_dp)
        self._overlay_ratio_enabled = False
        self.set_color(color)

    @property
    def cache(self) -> OverlayCompositeCache:
        return self._cache

    @property
    def annotator(self) -> ScaleAnnotator:
        return self._annotator

    def clear_cache(self) -> None:
        self._cache.clear()

    def set_overlay_ratio_enabled(self, enabled: bool) -> None:
        self._overlay_ratio_enabled = bool(enabled)

    def is_overlay_ratio_enabled(self) -> bool:
        return self._overlay_ratio_enabled

    def set_color(self, color: int) -> None:
        self._cache.set_color(color)
        self._annotator.set_colors(self._cache.qcolor(), self._cache.label_color())
        _LOGGER.debug("Overlay color set to #%08X", self._cache.color())

    def color(self) -> int:
        return self._cache.color()

    def drawImage(self, *args: Any) -> None:  # noqa: N802
        self._draw_bitmap("drawImage", QImage, args)

    def drawPixmap(self, *args: Any) -> None:  # noqa: N802
        self._draw_bitmap("drawPixmap", QPixmap, args)

    def _draw_bitmap(self, method: str, kind: type, args: Tuple[Any, ...]) -> None:
        delegate = self._require_delegate()
        index = _bitmap_index(args, kind)
        bitmap = args[index]
        if bitmap.isNull():
            getattr(delegate, method)(*args)
            return
        composite = self._cache.get_or_build(bitmap)
        getattr(delegate, method)(*args[:index], composite, *args[index + 1:])
        if self._overlay_ratio_enabled:
            geometry = draw_geometry(bitmap, args[:index], args[index + 1:])
            if geometry is None:
                _LOGGER.debug("Skipping scale label: empty source region in %s", method)
                return
            input_scale_x, input_scale_y, offset_x, offset_y = geometry
            self._annotator.compute_and_draw(
                self, bitmap, input_scale_x, input_scale_y, offset_x, offset_y
            )
