"""Configuration helpers for the pixel grid overlay."""
from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pixel_grid.color_utils import parse_color  # type: ignore
from pixel_grid.composite_cache import DEFAULT_COLOR  # type: ignore
from pixel_grid.scale_annotator import TEXT_SIZE_DP  # type: ignore

SETTINGS_FILENAME = "pixel_grid_settings.json"
_MIN_TEXT_SIZE_DP = 6.0
_MAX_TEXT_SIZE_DP = 72.0


@dataclass(frozen=True)
class OverlaySettings:
    """Values applied to a GridOverlayHost."""

    overlay_enabled: bool = True
    overlay_color: int = DEFAULT_COLOR
    overlay_ratio_enabled: bool = False
    text_size_dp: float = float(TEXT_SIZE_DP)
    log_retention: int = 5

    def from_payload(self, payload: Mapping[str, Any]) -> "OverlaySettings":
        """Return a copy with any recognised keys in ``payload`` applied."""
        return replace(
            self,
            overlay_enabled=_bool(payload.get("overlay_enabled"), self.overlay_enabled),
            overlay_color=_color(payload.get("overlay_color"), self.overlay_color),
            overlay_ratio_enabled=_bool(payload.get("overlay_ratio_enabled"), self.overlay_ratio_enabled),
            text_size_dp=_text_size(payload.get("text_size_dp"), self.text_size_dp),
            log_retention=_retention(payload.get("log_retention"), self.log_retention),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "overlay_enabled": self.overlay_enabled,
            "overlay_color": f"#{self.overlay_color:08X}",
            "overlay_ratio_enabled": self.overlay_ratio_enabled,
            "text_size_dp": self.text_size_dp,
            "log_retention": self.log_retention,
        }


def _bool(value: Any, fallback: bool) -> bool:
    if value is None:
        return fallback
    if isinstance(value, str):
        token = value.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
        return fallback
    return bool(value)


def _color(value: Any, fallback: int) -> int:
    parsed = parse_color(value)
    return fallback if parsed is None else parsed


def _text_size(value: Any, fallback: float) -> float:
    if value is None:
        return fallback
    try:
        size = float(value)
    except (TypeError, ValueError):
        return fallback
    if size != size:
        return fallback
    return max(_MIN_TEXT_SIZE_DP, min(size, _MAX_TEXT_SIZE_DP))


def _retention(value: Any, fallback: int) -> int:
    if value is None:
        return fallback
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        return fallback


def load_settings(settings_path: Path, defaults: Optional[OverlaySettings] = None) -> OverlaySettings:
    """Read settings from ``settings_path``, keeping defaults for anything missing or invalid."""
    defaults = defaults or OverlaySettings()
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return defaults

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return defaults
    if not isinstance(data, dict):
        return defaults
    return defaults.from_payload(data)


def save_settings(settings_path: Path, settings: OverlaySettings) -> None:
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    settings_path.write_text(json.dumps(settings.to_payload(), indent=2), encoding="utf-8")
