# Model/annotations.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

import cv2
import numpy as np

from Model.geometry import Point, distance, shape_kind

MARKER_RADIUS = 0.3            # normalized radius of a point marker
TOOLTIP_OFFSET = (15.0, 15.0)  # px, keeps the tooltip away from the cursor


@dataclass(frozen=True)
class TombAnnotation:
    id: str
    shape: Tuple[Point, ...]
    label: str
    date: str = ""

    @property
    def is_point(self) -> bool:
        return shape_kind(self.shape) == "point"


# ---- Stored shape <-> points ----
def shape_from_records(records: Optional[Iterable[Any]]) -> List[Point]:
    """
    Liest die gespeicherte Liste [{"x": .., "y": ..}, ...] unverändert ein
    (kein Runden, kein Schließen).
    """
    if records is None:
        return []
    pts: List[Point] = []
    for i, rec in enumerate(records):
        try:
            pts.append(Point(float(rec["x"]), float(rec["y"])))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"invalid shape coordinate at index {i}: {rec!r}") from e
    return pts

def shape_to_records(points: Sequence[Sequence[float]]) -> List[dict]:
    return [{"x": float(p[0]), "y": float(p[1])} for p in points]


def tomb_label(record: Mapping[str, Any]) -> str:
    # Display name of a tomb: its name, else "Tomba <number>"
    return record.get("Nome") or f"Tomba {record.get('Numero_tomba') or ''}".strip()

def annotation_from_record(record: Mapping[str, Any]) -> Optional[TombAnnotation]:
    shape = shape_from_records(record.get("shape_coordinates"))
    if not shape:
        return None
    return TombAnnotation(
        id=str(record["id"]),
        shape=tuple(shape),
        label=tomb_label(record),
        date=record.get("datazione") or "",
    )

def annotations_from_records(records: Iterable[Mapping[str, Any]]) -> List[TombAnnotation]:
    out = []
    for rec in records:
        try:
            ann = annotation_from_record(rec)
        except ValueError as e:
            print(f"[MAP] skipping tomb {rec.get('id')!r}: {e}")
            continue
        if ann is not None:
            out.append(ann)
    return out


# ---- Hit testing ----
def _inside_polygon(shape: Sequence[Point], point: Sequence[float]) -> bool:
    contour = np.asarray(shape, dtype=np.float32).reshape(-1, 1, 2)
    # >= 0: inside or on the edge
    return cv2.pointPolygonTest(contour, (float(point[0]), float(point[1])), False) >= 0

def hit_test(annotations: Sequence[TombAnnotation], point: Optional[Sequence[float]],
             marker_radius: float = MARKER_RADIUS) -> Optional[TombAnnotation]:
    # Last drawn annotation is on top -> search backwards
    if point is None:
        return None
    for ann in reversed(annotations):
        kind = shape_kind(ann.shape)
        if kind == "point":
            if distance(ann.shape[0], point) <= marker_radius:
                return ann
        elif kind == "polygon" and _inside_polygon(ann.shape, point):
            return ann
    return None


class HoverState:
    """The single annotation under the pointer plus where its tooltip goes."""

    def __init__(self):
        self.annotation: Optional[TombAnnotation] = None
        self.pointer: Tuple[float, float] = (0.0, 0.0)

    def update(self, annotation: Optional[TombAnnotation], pos: Sequence[float]) -> bool:
        # Returns True when the hovered annotation changed
        changed = annotation != self.annotation
        self.annotation = annotation
        self.pointer = (float(pos[0]), float(pos[1]))
        return changed

    def clear(self) -> bool:
        changed = self.annotation is not None
        self.annotation = None
        return changed

    @property
    def tooltip_pos(self) -> Tuple[float, float]:
        return self.pointer[0] + TOOLTIP_OFFSET[0], self.pointer[1] + TOOLTIP_OFFSET[1]
