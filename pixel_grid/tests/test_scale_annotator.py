import math

import pytest
from PyQt6.QtGui import QBrush, QColor, QImage, QPainterPath, QPen, QTransform

from pixel_grid.display_metrics import DisplayMetrics
from pixel_grid.scale_annotator import (
    DENSITY_NONE,
    STROKE_ALPHA,
    ScaleAnnotator,
    density_from_ratio,
    effective_scale,
    format_scale,
    image_density,
    transform_scale,
    truncate_scale,
)


class _RecordingSurface:
    def __init__(self, transform=None, density: int = DENSITY_NONE, fail_on=None) -> None:
        self.calls = []
        self._transform = transform if transform is not None else QTransform()
        self._density = density
        self._fail_on = fail_on

    def worldTransform(self):  # noqa: N802
        return QTransform(self._transform)

    def density(self) -> int:
        return self._density

    def save(self) -> None:
        self.calls.append(("save",))

    def restore(self) -> None:
        self.calls.append(("restore",))

    def scale(self, sx: float, sy: float) -> None:
        self.calls.append(("scale", sx, sy))

    def strokePath(self, path, pen) -> None:  # noqa: N802
        self.calls.append(("strokePath", path, pen))
        if self._fail_on == "strokePath":
            raise RuntimeError("stroke failed")

    def fillPath(self, path, brush) -> None:  # noqa: N802
        self.calls.append(("fillPath", path, brush))


def _image(width: int = 100, height: int = 100, ratio: float = 1.0) -> QImage:
    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(0)
    image.setDevicePixelRatio(ratio)
    return image


@pytest.mark.parametrize(
    "value, expected",
    [
        (1.503, 1.5),
        (1.497, 1.49),
        (2.001, 2.0),
        (1.999, 1.99),
        (-1.257, -1.25),
        (0.004, 0.0),
        (57 / 100, 0.57),
        (29 / 100, 0.29),
    ],
)
def test_truncate_scale_cuts_toward_zero(value, expected):
    assert truncate_scale(value) == pytest.approx(expected)


@pytest.mark.parametrize(
    "scale_x, scale_y, expected",
    [
        (1.503, 1.497, "1.50 x 1.49"),
        (2.001, 1.999, "2.00 x 1.99"),
        (3.0, 3.0, "3.0"),
        (1.5, 1.5, "1.50"),
        (0.75, 0.755, "0.75"),
    ],
)
def test_format_scale(scale_x, scale_y, expected):
    assert format_scale(truncate_scale(scale_x), truncate_scale(scale_y)) == expected


def test_transform_scale_survives_rotation():
    transform = QTransform().rotate(30).scale(2.0, 3.0)
    scale_x, scale_y = transform_scale(transform)
    assert scale_x == pytest.approx(2.0)
    assert scale_y == pytest.approx(3.0)


def test_effective_scale_applies_density_ratio():
    assert effective_scale(QTransform(), 1.0, 1.0, 320, 160) == (2.0, 2.0)


def test_effective_scale_ignores_density_when_undefined():
    assert effective_scale(QTransform(), 1.0, 1.0, DENSITY_NONE, 160) == (1.0, 1.0)
    assert effective_scale(QTransform(), 1.0, 1.0, 320, DENSITY_NONE) == (1.0, 1.0)


def test_effective_scale_combines_transform_and_hints():
    transform = QTransform().scale(1.5, 0.5)
    assert effective_scale(transform, 2.0, 4.0) == (3.0, 2.0)


def test_density_helpers():
    assert density_from_ratio(1.0) == 160
    assert density_from_ratio(2.0) == 320
    assert density_from_ratio(0) == DENSITY_NONE
    assert density_from_ratio("bad") == DENSITY_NONE
    assert image_density(_image(ratio=1.5)) == 240
    assert image_density(QImage()) == DENSITY_NONE


def test_label_text_size_follows_display_density():
    annotator = ScaleAnnotator(DisplayMetrics(density=2.0))
    assert annotator.text_size == 28.0
    assert annotator.label_offset == 14.0


def test_label_is_centered_on_scaled_footprint():
    annotator = ScaleAnnotator(DisplayMetrics(density=1.0))
    label = annotator.label_for(QTransform(), 100, 100, 2.0, 1.0, 10, 10)
    assert label.text == "2.00 x 1.00"
    assert label.center_x == pytest.approx(110.0)
    assert label.baseline == pytest.approx(67.0)


def test_set_colors_applies_stroke_alpha():
    annotator = ScaleAnnotator()
    annotator.set_colors(QColor(255, 0, 0, 255), QColor(0, 0, 255))
    assert annotator.stroke_color().alpha() == STROKE_ALPHA
    assert annotator.stroke_color().red() == 255
    assert annotator.fill_color() == QColor(0, 0, 255)


def test_compute_and_draw_counter_scales_inside_save_restore():
    annotator = ScaleAnnotator(DisplayMetrics(density=1.0))
    annotator.set_colors(QColor(255, 0, 136), QColor(0, 200, 0))
    surface = _RecordingSurface(transform=QTransform().scale(2.0, 2.0))
    label = annotator.compute_and_draw(surface, _image(), 1.0, 0.5, 0, 0)

    assert label is not None
    assert label.text == "2.00 x 1.00"
    names = [call[0] for call in surface.calls]
    assert names == ["save", "scale", "strokePath", "fillPath", "restore"]
    assert surface.calls[1] == ("scale", 0.5, 1.0)

    _, stroke_path, pen = surface.calls[2]
    _, fill_path, brush = surface.calls[3]
    assert isinstance(stroke_path, QPainterPath)
    assert stroke_path is fill_path
    assert isinstance(pen, QPen)
    assert pen.color().alpha() == STROKE_ALPHA
    assert pen.widthF() == pytest.approx(1.4)
    assert isinstance(brush, QBrush)
    assert brush.color() == QColor(0, 200, 0)


def test_compute_and_draw_uses_surface_density():
    annotator = ScaleAnnotator()
    surface = _RecordingSurface(density=320)
    label = annotator.compute_and_draw(surface, _image(ratio=1.0), 1.0, 1.0, 0, 0)
    assert label.scale_x == 2.0
    assert label.scale_y == 2.0
    assert label.text == "2.0"
    assert ("scale", 0.5, 0.5) in surface.calls


def test_restore_runs_when_drawing_fails():
    annotator = ScaleAnnotator()
    surface = _RecordingSurface(fail_on="strokePath")
    with pytest.raises(RuntimeError):
        annotator.compute_and_draw(surface, _image(), 1.0, 1.0, 0, 0)
    assert surface.calls[0] == ("save",)
    assert surface.calls[-1] == ("restore",)


def test_label_skipped_when_scale_truncates_to_zero():
    annotator = ScaleAnnotator()
    surface = _RecordingSurface(transform=QTransform().scale(0.001, 1.0))
    assert annotator.compute_and_draw(surface, _image(), 1.0, 1.0, 0, 0) is None
    assert surface.calls == []


def test_rotated_transform_reports_unrotated_scale():
    annotator = ScaleAnnotator()
    surface = _RecordingSurface(transform=QTransform().rotate(45))
    label = annotator.compute_and_draw(surface, _image(), 1.0, 1.0, 0, 0)
    assert label.text == "1.0"
    assert math.isclose(label.scale_x, label.scale_y)


def test_label_text_keeps_exact_two_decimal_scales():
    annotator = ScaleAnnotator()
    assert annotator.label_for(QTransform(), 100, 100, 57 / 100, 1.0, 0, 0).text == "0.57 x 1.00"
    assert annotator.label_for(QTransform(), 100, 100, 29 / 100, 29 / 100, 0, 0).text == "0.29"


def test_hidpi_label_anchors_on_logical_size():
    annotator = ScaleAnnotator(DisplayMetrics(density=1.0))
    surface = _RecordingSurface(density=320)
    label = annotator.compute_and_draw(surface, _image(ratio=2.0), 1.0, 1.0, 0, 0)
    assert label.text == "1.0"
    assert label.center_x == pytest.approx(25.0)
    assert label.baseline == pytest.approx(32.0)
