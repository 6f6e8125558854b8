"""Per-entity numeric attributes kept outside the curve data."""

from __future__ import annotations

import math
from typing import Hashable, Protocol

from roundline.validation import ValidationError


class AttributeStore(Protocol):
    def get_float(self, key: Hashable, name: str) -> float | None: ...

    def set_float(self, key: Hashable, name: str, value: float) -> None: ...


class InMemoryAttributeStore:
    """Dictionary-backed ``AttributeStore`` for tests and the CLI."""

    def __init__(self) -> None:
        self._data: dict[Hashable, dict[str, float]] = {}

    def get_float(self, key: Hashable, name: str) -> float | None:
        return self._data.get(key, {}).get(name)

    def set_float(self, key: Hashable, name: str, value: float) -> None:
        self._data.setdefault(key, {})[name] = float(value)

    def remove(self, key: Hashable, name: str | None = None) -> None:
        if name is None:
            self._data.pop(key, None)
            return
        self._data.get(key, {}).pop(name, None)


def pipe_diameter(store: AttributeStore, key: Hashable, name: str) -> float:
    """Return the stored pipe diameter, or 0.0 when there is no usable value."""

    value = store.get_float(key, name)
    if value is None:
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value <= 0.0:
        return 0.0
    return value


def set_pipe_diameter(store: AttributeStore, key: Hashable, name: str, diameter: float) -> None:
    diameter = float(diameter)
    if not math.isfinite(diameter) or diameter <= 0.0:
        raise ValidationError("pipe diameter must be positive.")
    store.set_float(key, name, diameter)


__all__ = ["AttributeStore", "InMemoryAttributeStore", "pipe_diameter", "set_pipe_diameter"]
