# Model/digitizer.py
from __future__ import annotations
from typing import Callable, List, Optional, Sequence

from Controller.enums import DrawMode
from Model.geometry import Point, close_ring, distance, is_closed, round_point

SNAP_THRESHOLD = 2.0  # normalized units (percent of the image)

ShapeCallback = Callable[[List[Point]], None]


class DrawingSession:
    """
    Builds one tomb shape from clicks on the map.

    Point mode: every click is final and yields [p].
    Polygon mode: clicks append vertices; once at least 3 vertices exist and the pointer
    is within SNAP_THRESHOLD of the first vertex, the next click closes the polygon by
    repeating the first vertex and reports it.

    Every reported shape goes through on_shape_change (point placed, polygon closed,
    save, clear). All coordinates are rounded to 2 decimals when captured.
    """

    def __init__(self, mode: DrawMode = DrawMode.POINT, points: Optional[Sequence[Sequence[float]]] = None,
                 on_shape_change: Optional[ShapeCallback] = None):
        self.mode: DrawMode = mode
        self.points: List[Point] = [Point(float(p[0]), float(p[1])) for p in (points or [])]
        self.snap_target: Optional[Point] = None
        self.committed: bool = False
        self.on_shape_change = on_shape_change

    # ---- Mode / external sync ----
    def set_mode(self, mode: DrawMode):
        # Switching (even to the same mode) always starts over
        self.mode = mode
        self._reset()

    def load(self, points: Optional[Sequence[Sequence[float]]]):
        # Take over the stored shape of the selected tomb, nothing is reported
        self.points = [Point(float(p[0]), float(p[1])) for p in (points or [])]
        self.snap_target = None
        # a stored closed polygon is finished, the next click starts a new one
        self.committed = is_closed(self.points)

    # ---- Pointer input ----
    def click(self, x: float, y: float) -> Optional[List[Point]]:
        p = round_point((x, y))

        if self.mode is DrawMode.POINT:
            self.points = [p]
            self.committed = True
            return self._report(self.points)

        # Polygon mode
        if self.committed:
            # the previous polygon was handed over, this click starts a new one
            self.points = []
            self.committed = False

        if self.snap_target is not None and len(self.points) >= 3:
            self.points = self.points + [self.points[0]]
            self.snap_target = None
            self.committed = True
            return self._report(self.points)

        self.points = self.points + [p]
        return None

    def pointer_move(self, x: float, y: float) -> Optional[Point]:
        if self.mode is not DrawMode.POLYGON or len(self.points) < 2 or self.committed:
            self.snap_target = None
            return None
        first = self.points[0]
        if len(self.points) >= 3 and distance(first, (x, y)) < SNAP_THRESHOLD:
            self.snap_target = first
        else:
            self.snap_target = None
        return self.snap_target

    # ---- Toolbar actions ----
    def undo(self) -> bool:
        if not self.points:
            return False
        self.points = self.points[:-1]
        self.snap_target = None
        self.committed = False
        return True

    def clear(self) -> List[Point]:
        self._reset()
        self._report([])
        return []

    def save(self) -> Optional[List[Point]]:
        if not self.points:
            return None
        shape = list(self.points)
        if self.mode is DrawMode.POLYGON:
            # canonical form: polygons are stored with the explicit closing vertex
            shape = close_ring(shape)
            self.points = shape
        self.snap_target = None
        self.committed = True
        return self._report(shape)

    # ---- Status ----
    @property
    def can_close(self) -> bool:
        return self.mode is DrawMode.POLYGON and len(self.points) >= 3 and not self.committed

    def status_text(self) -> str:
        n = len(self.points)
        if n == 0:
            return ""
        if self.snap_target is not None:
            return "Snapped to the first point! Click to close the polygon."
        text = f"{n} {'point' if n == 1 else 'points'} drawn."
        if self.can_close:
            text += " Move close to the first (green) point to close the polygon."
        return text

    # ---- Helpers ----
    def _reset(self):
        self.points = []
        self.snap_target = None
        self.committed = False

    def _report(self, shape: List[Point]) -> List[Point]:
        shape = list(shape)
        if self.on_shape_change is not None:
            self.on_shape_change(list(shape))
        return shape
