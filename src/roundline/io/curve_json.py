from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from roundline.curve import Curve
from roundline.validation import ValidationError


def curve_to_dict(curve: Curve) -> Dict[str, Any]:
    return {
        "points": [[float(v) for v in point] for point in curve.points],
        "bulges": [float(b) for b in curve.bulges],
        "closed": curve.closed,
    }


def curve_from_dict(data: Dict[str, Any]) -> Curve:
    if not isinstance(data, dict) or "points" not in data:
        raise ValidationError("Curve document must be an object with a 'points' list.")
    points = data["points"]
    if not isinstance(points, list):
        raise ValidationError("'points' must be a list of coordinates.")
    bulges = data.get("bulges")
    if bulges is not None and (not isinstance(bulges, list) or len(bulges) != len(points)):
        raise ValidationError("'bulges' must hold one value per point.")
    return Curve(points=points, bulges=bulges, closed=bool(data.get("closed", False)))


def load_curve(path: Path) -> Curve:
    path = Path(path)
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path} is not valid JSON: {exc}") from exc
    return curve_from_dict(data)


def dump_curve(curve: Curve, path: Path) -> None:
    path = Path(path)
    path.write_text(json.dumps(curve_to_dict(curve), indent=2) + "\n")
