"""Effective on-screen scale computation and the label drawn over each bitmap."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from PyQt6.QtCore import QPointF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QFontMetricsF, QPainterPath, QPen, QTransform

from pixel_grid.display_metrics import DisplayMetrics  # type: ignore
from pixel_grid.logging_utils import get_logger  # type: ignore

DENSITY_NONE = 0
DENSITY_BASELINE = 160
TEXT_SIZE_DP = 14
STROKE_WIDTH_RATIO = 0.10
STROKE_ALPHA = 0x66  # 40% opacity.
_PRECISION = 100.0

_LOGGER = get_logger("Scale")


def density_from_ratio(ratio: Any) -> int:
    try:
        value = float(ratio)
    except (TypeError, ValueError):
        return DENSITY_NONE
    if not math.isfinite(value) or value <= 0.0:
        return DENSITY_NONE
    return int(round(DENSITY_BASELINE * value))


def image_density(image: Any) -> int:
    """Density of a QImage/QPixmap in baseline-160 units, or DENSITY_NONE."""
    if image is None or image.isNull():
        return DENSITY_NONE
    return density_from_ratio(image.devicePixelRatio())


def transform_scale(transform: QTransform) -> Tuple[float, float]:
    """Net axis scale of ``transform``; stays correct under rotation."""
    scale_x = math.hypot(transform.m11(), transform.m12())
    scale_y = math.hypot(transform.m22(), transform.m21())
    return scale_x, scale_y


def truncate_scale(value: float) -> float:
    """Cut ``value`` to two decimals, truncating toward zero."""
    # Round away binary representation error first so 0.57 stays 0.57.
    return math.trunc(round(value * _PRECISION, 6)) / _PRECISION


def format_scale(scale_x: float, scale_y: float) -> str:
    if abs(scale_x - scale_y) < 1 / _PRECISION:
        if float(scale_x).is_integer():
            return f"{scale_x:.1f}"
        return f"{scale_x:.2f}"
    return f"{scale_x:.2f} x {scale_y:.2f}"


def effective_scale(
    transform: QTransform,
    input_scale_x: float,
    input_scale_y: float,
    surface_density: int = DENSITY_NONE,
    bitmap_density: int = DENSITY_NONE,
) -> Tuple[float, float]:
    """Combine transform, call-site and density scaling, truncated for display."""
    # 1. painter transform
    scale_x, scale_y = transform_scale(transform)

    # 2. call-site source/destination ratio
    scale_x *= input_scale_x
    scale_y *= input_scale_y

    # 3. surface/bitmap density ratio
    if surface_density != DENSITY_NONE and bitmap_density != DENSITY_NONE:
        density_factor = surface_density / bitmap_density
        scale_x *= density_factor
        scale_y *= density_factor

    return truncate_scale(scale_x), truncate_scale(scale_y)


@dataclass(frozen=True)
class ScaleLabel:
    """Label text and its anchor in the counter-scaled coordinate space."""

    scale_x: float
    scale_y: float
    text: str
    center_x: float
    baseline: float


class ScaleAnnotator:
    """Draws the effective scale of a bitmap at a transform-independent size."""

    def __init__(self, metrics: Optional[DisplayMetrics] = None, text_size_dp: float = TEXT_SIZE_DP) -> None:
        self._metrics = metrics or DisplayMetrics()
        self._text_size = self._metrics.text_size_px(text_size_dp)
        self._stroke_color = QColor(Qt.GlobalColor.white)
        self._fill_color = QColor(Qt.GlobalColor.black)
        self._font: Optional[QFont] = None

    @property
    def text_size(self) -> float:
        return self._text_size

    @property
    def label_offset(self) -> float:
        return self._text_size / 2

    def set_colors(self, stroke: QColor, fill: QColor) -> None:
        self._stroke_color = QColor(stroke)
        self._stroke_color.setAlpha(STROKE_ALPHA)
        self._fill_color = QColor(fill)

    def stroke_color(self) -> QColor:
        return QColor(self._stroke_color)

    def fill_color(self) -> QColor:
        return QColor(self._fill_color)

    def label_for(
        self,
        transform: QTransform,
        width: float,
        height: float,
        input_scale_x: float,
        input_scale_y: float,
        offset_x: int,
        offset_y: int,
        surface_density: int = DENSITY_NONE,
        bitmap_density: int = DENSITY_NONE,
    ) -> ScaleLabel:
        scale_x, scale_y = effective_scale(
            transform, input_scale_x, input_scale_y, surface_density, bitmap_density
        )
        return ScaleLabel(
            scale_x=scale_x,
            scale_y=scale_y,
            text=format_scale(scale_x, scale_y),
            center_x=scale_x * width / 2 + offset_x,
            baseline=scale_y * height / 2 + offset_y + self.label_offset,
        )

    def compute_and_draw(
        self,
        surface: Any,
        image: Any,
        input_scale_x: float,
        input_scale_y: float,
        offset_x: int,
        offset_y: int,
    ) -> Optional[ScaleLabel]:
        """Draw the scale label for ``image`` on ``surface``.

        ``surface`` provides ``worldTransform()`` and ``density()`` plus the
        QPainter calls used to draw. Returns the drawn label, or None when a
        truncated scale is zero and no label can be placed.
        """
        # Anchor on the logical footprint; pixel size differs when devicePixelRatio != 1.
        size = image.deviceIndependentSize()
        label = self.label_for(
            surface.worldTransform(),
            size.width(),
            size.height(),
            input_scale_x,
            input_scale_y,
            offset_x,
            offset_y,
            surface_density=surface.density(),
            bitmap_density=image_density(image),
        )
        if label.scale_x == 0.0 or label.scale_y == 0.0:
            _LOGGER.debug("Skipping scale label for %s: scale below display precision", label.text)
            return None

        surface.save()
        try:
            surface.scale(1.0 / label.scale_x, 1.0 / label.scale_y)
            path = self._text_path(label)
            pen = QPen(self._stroke_color)
            pen.setWidthF(self._text_size * STROKE_WIDTH_RATIO)
            surface.strokePath(path, pen)
            surface.fillPath(path, QBrush(self._fill_color))
        finally:
            surface.restore()
        return label

    def _label_font(self) -> QFont:
        if self._font is None:
            font = QFont()
            font.setPixelSize(max(1, int(round(self._text_size))))
            self._font = font
        return self._font

    def _text_path(self, label: ScaleLabel) -> QPainterPath:
        font = self._label_font()
        text_width = QFontMetricsF(font).horizontalAdvance(label.text)
        path = QPainterPath()
        path.addText(QPointF(label.center_x - text_width / 2, label.baseline), font, label.text)
        return path
