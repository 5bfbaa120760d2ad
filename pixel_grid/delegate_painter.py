"""A painter stand-in that forwards every call to a wrapped QPainter."""
from __future__ import annotations

from typing import Any, Optional

from pixel_grid.scale_annotator import DENSITY_NONE, density_from_ratio  # type: ignore


class DelegatePainter:
    """Forwards attribute access to the painter set with :meth:`set_delegate`.

    Subclasses override the QPainter methods they want to intercept; every other
    call reaches the delegate unchanged.
    """

    def __init__(self) -> None:
        self._delegate: Optional[Any] = None
        self._density_override: Optional[int] = None

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or name in {"_delegate", "_density_override"}:
            raise AttributeError(name)
        delegate = self._delegate
        if delegate is None:
            raise AttributeError(f"{type(self).__name__}.{name}: no painter delegate set")
        return getattr(delegate, name)

    def set_delegate(self, painter: Any) -> None:
        self._delegate = painter

    def clear_delegate(self) -> None:
        self._delegate = None

    def delegate(self) -> Optional[Any]:
        return self._delegate

    def _require_delegate(self) -> Any:
        if self._delegate is None:
            raise AttributeError(f"{type(self).__name__}: no painter delegate set")
        return self._delegate

    def set_density(self, density: Optional[int]) -> None:
        """Pin the surface density; ``None`` derives it from the painted device again."""
        self._density_override = None if density is None else int(density)

    def density(self) -> int:
        if self._density_override is not None:
            return self._density_override
        delegate = self._delegate
        if delegate is None:
            return DENSITY_NONE
        device = delegate.device()
        if device is None:
            return DENSITY_NONE
        return density_from_ratio(device.devicePixelRatioF())
