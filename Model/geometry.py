# Model/geometry.py
from __future__ import annotations
import math
from typing import NamedTuple, Optional, Sequence, List


class Point(NamedTuple):
    # Normalized position: percent (0..100) of the base image width / height, origin top-left
    x: float
    y: float


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))

def round_coord(v: float) -> float:
    """Rundet auf 2 Nachkommastellen (half-up, wie beim Speichern der Formen)."""
    return math.floor(v * 100.0 + 0.5) / 100.0

def round_point(p: Sequence[float]) -> Point:
    return Point(round_coord(p[0]), round_coord(p[1]))

def distance(a: Sequence[float], b: Sequence[float]) -> float:
    dx = a[0] - b[0]; dy = a[1] - b[1]
    return (dx*dx + dy*dy) ** 0.5

def centroid(points: Sequence[Sequence[float]]) -> Optional[Point]:
    # Mean of all listed vertices; a stored closing duplicate counts as a vertex
    if not points:
        return None
    if len(points) == 1:
        return Point(float(points[0][0]), float(points[0][1]))
    sx = sum(p[0] for p in points)
    sy = sum(p[1] for p in points)
    n = float(len(points))
    return Point(sx / n, sy / n)

def is_closed(points: Sequence[Sequence[float]]) -> bool:
    return len(points) >= 4 and tuple(points[0]) == tuple(points[-1])

def close_ring(points: Sequence[Sequence[float]]) -> List[Point]:
    """
    Liefert den Polygonzug mit explizitem Schlusspunkt (Kopie des ersten Punkts).
    Weniger als 3 Punkte -> unverändert zurück.
    """
    pts = [Point(float(p[0]), float(p[1])) for p in points]
    if len(pts) < 3 or is_closed(pts):
        return pts
    return pts + [pts[0]]

def shape_kind(points: Sequence[Sequence[float]]) -> str:
    n = len(points)
    if n == 0:
        return "empty"
    if n == 1:
        return "point"
    if n == 2:
        return "line"
    return "polygon"
