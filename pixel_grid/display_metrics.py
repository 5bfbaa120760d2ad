"""Display density used to size the scale label in physical pixels."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class DisplayMetrics:
    """Logical-to-physical pixel factor of the target display (1.0 = baseline)."""

    density: float = 1.0

    @classmethod
    def from_screen(cls, screen: Optional[Any]) -> "DisplayMetrics":
        if screen is None:
            return cls()
        try:
            ratio = float(screen.devicePixelRatio())
        except (AttributeError, TypeError, ValueError):
            return cls()
        if not ratio > 0.0:
            return cls()
        return cls(density=ratio)

    def text_size_px(self, size_dp: float) -> float:
        return float(size_dp) * self.density
