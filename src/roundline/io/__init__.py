"""Reading and writing curves on disk."""

from __future__ import annotations

from .curve_json import dump_curve, load_curve

__all__ = ["dump_curve", "load_curve"]
