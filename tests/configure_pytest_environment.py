"""Run pytest with the project root importable and an offscreen Qt platform.

Usage:
    python tests/configure_pytest_environment.py [pytest args]

Inserts the project root on sys.path so ``version`` and ``pixel_grid`` resolve
without an install, forces ``QT_QPA_PLATFORM=offscreen`` for headless runs and
then dispatches pytest with the arguments you provide.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path


def _require_pyqt6() -> None:
    try:
        import PyQt6  # noqa: F401
    except ImportError as exc:
        print("PyQt6 is not installed; run `pip install -e .[test]` first.", file=sys.stderr)
        raise SystemExit(1) from exc


def main(argv: list[str]) -> int:
    root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(root))
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

    try:
        import pytest  # type: ignore
    except ImportError as exc:  # pragma: no cover
        print("pytest is not installed in this environment.", file=sys.stderr)
        raise SystemExit(1) from exc

    _require_pyqt6()

    return pytest.main(argv or [str(root)])


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
