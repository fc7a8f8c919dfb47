from __future__ import annotations

import re

from domain.errors import CurveDescriptorError
from domain.models import CubicCurve, NodeBox, Point

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_NUMBER_RE = re.compile(_NUMBER)
_SEP = r"(?:\s*,\s*|\s+)"
_PAIR = rf"({_NUMBER}){_SEP}({_NUMBER})"
# M x y C cx1 cy1, cx2 cy2, x y
_CURVE_RE = re.compile(
    rf"^\s*M\s*{_PAIR}\s*C\s*{_PAIR}{_SEP}{_PAIR}{_SEP}{_PAIR}\s*$"
)


def route_curve(from_box: NodeBox, to_box: NodeBox, horizontal_offset: float) -> CubicCurve:
    start = from_box.right_middle()
    end = to_box.left_middle()
    return CubicCurve(
        start=start,
        control1=Point(start.x + horizontal_offset, start.y),
        control2=Point(end.x - horizontal_offset, end.y),
        end=end,
    )


def parse_curve(descriptor: str) -> CubicCurve:
    match = _CURVE_RE.match(descriptor)
    if match is None:
        raise CurveDescriptorError(descriptor, len(_NUMBER_RE.findall(descriptor)))
    x1, y1, cx1, cy1, cx2, cy2, x2, y2 = (float(token) for token in match.groups())
    return CubicCurve(
        start=Point(x1, y1),
        control1=Point(cx1, cy1),
        control2=Point(cx2, cy2),
        end=Point(x2, y2),
    )


def point_at(curve: CubicCurve | str, t: float) -> Point:
    """Evaluate the curve at ``t`` by De Casteljau subdivision."""
    if isinstance(curve, str):
        curve = parse_curve(curve)
    if not 0.0 <= t <= 1.0:
        msg = f"Curve parameter must be within [0, 1], got {t}"
        raise ValueError(msg)
    points = list(curve.points())
    while len(points) > 1:
        points = [_lerp(a, b, t) for a, b in zip(points, points[1:])]
    return points[0]


def midpoint(curve: CubicCurve | str) -> Point:
    return point_at(curve, 0.5)


def sample_curve(curve: CubicCurve, segments: int = 16) -> list[Point]:
    if segments < 1:
        msg = "segments must be positive"
        raise ValueError(msg)
    return [point_at(curve, idx / segments) for idx in range(segments + 1)]


def _lerp(a: Point, b: Point, t: float) -> Point:
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)
