"""Owner-side wiring: decides per paint pass whether bitmaps get the grid overlay."""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from pixel_grid.display_metrics import DisplayMetrics  # type: ignore
from pixel_grid.grid_painter import GridOverlayPainter  # type: ignore
from pixel_grid.logging_utils import configure_logging, get_logger  # type: ignore
from pixel_grid.settings import OverlaySettings, load_settings  # type: ignore

_LOGGER = get_logger("Host")


class GridOverlayHost:
    """Holds one GridOverlayPainter and hands it out while the overlay is enabled.

    Typical use inside a ``paintEvent``::

        painter = QPainter(self)
        with self._grid_host.paint(painter) as target:
            target.drawImage(QPoint(0, 0), self._image)
        painter.end()
    """

    def __init__(
        self,
        metrics: Optional[DisplayMetrics] = None,
        settings: Optional[OverlaySettings] = None,
    ) -> None:
        settings = settings or OverlaySettings()
        self._painter = GridOverlayPainter(
            metrics,
            color=settings.overlay_color,
            text_size_dp=settings.text_size_dp,
        )
        self._overlay_enabled = settings.overlay_enabled
        self._painter.set_overlay_ratio_enabled(settings.overlay_ratio_enabled)

    @classmethod
    def from_settings_file(
        cls,
        settings_path: Path,
        metrics: Optional[DisplayMetrics] = None,
        *,
        log_dir: Optional[Path] = None,
        debug_enabled: Optional[bool] = None,
    ) -> GridOverlayHost:
        """Load settings, configure package logging from them and build a host.

        With ``log_dir`` set, a rotating ``pixel_grid.log`` keeping
        ``log_retention`` files is attached to the package logger.
        """
        settings = load_settings(settings_path)
        configure_logging(
            debug_enabled=debug_enabled,
            log_dir=log_dir,
            retention=settings.log_retention,
        )
        _LOGGER.debug("Loaded overlay settings from %s", settings_path)
        return cls(metrics, settings)

    @property
    def painter(self) -> GridOverlayPainter:
        return self._painter

    @property
    def overlay_enabled(self) -> bool:
        return self._overlay_enabled

    @overlay_enabled.setter
    def overlay_enabled(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if enabled == self._overlay_enabled:
            return
        self._overlay_enabled = enabled
        if not enabled:
            # Composites are useless while disabled; let them go.
            self._painter.clear_cache()
        _LOGGER.debug("Grid overlay %s", "enabled" if enabled else "disabled")

    def set_overlay_color(self, color: int) -> None:
        self._painter.set_color(color)

    def overlay_color(self) -> int:
        return self._painter.color()

    def set_overlay_ratio_enabled(self, enabled: bool) -> None:
        self._painter.set_overlay_ratio_enabled(enabled)

    def is_overlay_ratio_enabled(self) -> bool:
        return self._painter.is_overlay_ratio_enabled()

    def apply_settings(self, settings: OverlaySettings) -> None:
        self.overlay_enabled = settings.overlay_enabled
        if settings.overlay_color != self._painter.color():
            self._painter.set_color(settings.overlay_color)
        self._painter.set_overlay_ratio_enabled(settings.overlay_ratio_enabled)

    @contextmanager
    def paint(self, painter: Any) -> Iterator[Any]:
        if not self._overlay_enabled:
            yield painter
            return
        self._painter.set_delegate(painter)
        try:
            yield self._painter
        finally:
            self._painter.clear_delegate()
