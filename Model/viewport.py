# Model/viewport.py
from __future__ import annotations
from typing import Optional, Sequence, Tuple

import numpy as np

from Controller.enums import ViewportMode
from Model.geometry import Point, clamp

ZOOM_MIN = 0.5
ZOOM_MAX = 5.0
WHEEL_ZOOM_OUT = 0.9
WHEEL_ZOOM_IN = 1.1
BUTTON_ZOOM_IN = 1.5
BUTTON_ZOOM_OUT = 0.75
DRAG_THRESHOLD = 3.0  # px the pointer must travel before a press counts as a drag

Size = Tuple[float, float]
Bounds = Tuple[float, float, float, float]  # left, top, width, height


class ViewportController:
    """
    Zoom + pan over a fixed base image, and the conversion between screen pixels
    (relative to the map widget) and normalized image coordinates (0..100 per axis).

    Layout: the image is laid out at the full container width, its height follows the
    aspect ratio of the image. Without an image the last known container size is used.
    The view transform is applied on top of that with the origin at the top-left corner:

        screen = pan + zoom * base
    """

    def __init__(self, mode: Optional[ViewportMode] = None, initial_zoom: float = 1.0,
                 anchor: Optional[Sequence[float]] = None):
        self.mode: ViewportMode = mode or ViewportMode.interactive()
        self.zoom: float = clamp(float(initial_zoom), ZOOM_MIN, ZOOM_MAX)
        self.pan: Tuple[float, float] = (0.0, 0.0)
        self.container_size: Optional[Size] = None
        self.image_size: Optional[Size] = None
        # Normalized point a static view keeps in its center
        self.anchor: Optional[Point] = Point(*anchor) if anchor is not None else None
        # center_on before the first layout, applied once the container size is known
        self._pending_center: Optional[Point] = None

        # Drag bookkeeping
        self.dragging: bool = False
        self.drag_moved: bool = False
        self._drag_offset: Tuple[float, float] = (0.0, 0.0)  # press position - pan at press
        self._press_pos: Optional[Tuple[float, float]] = None

    # ---- Layout ----
    def set_mode(self, mode: ViewportMode):
        self.mode = mode
        if not mode.can_pan:
            self.dragging = False
        self._apply_anchor()

    def set_container_size(self, width: float, height: float):
        if width <= 0 or height <= 0:
            return
        self.container_size = (float(width), float(height))
        if self._pending_center is not None:
            point, self._pending_center = self._pending_center, None
            self.center_on(point)
        self._apply_anchor()

    def set_image_size(self, size: Optional[Size]):
        # None -> image missing / failed to load, keep working against the container
        if size is not None and (size[0] <= 0 or size[1] <= 0):
            size = None
        self.image_size = (float(size[0]), float(size[1])) if size is not None else None
        self._apply_anchor()

    def base_size(self) -> Optional[Size]:
        # Size of the image element before zoom / pan
        if self.container_size is None:
            return None
        cw, ch = self.container_size
        if self.image_size is None:
            return cw, ch
        iw, ih = self.image_size
        return cw, cw * ih / iw

    def image_bounds(self) -> Optional[Bounds]:
        base = self.base_size()
        if base is None:
            return None
        bw, bh = base
        return self.pan[0], self.pan[1], bw * self.zoom, bh * self.zoom

    def view_matrix(self) -> Optional[np.ndarray]:
        # 3x3 affine: normalized (0..100) -> screen
        base = self.base_size()
        if base is None:
            return None
        bw, bh = base
        z = self.zoom
        px, py = self.pan
        to_base = np.array([[bw / 100.0, 0.0, 0.0],
                            [0.0, bh / 100.0, 0.0],
                            [0.0, 0.0, 1.0]])
        view = np.array([[z, 0.0, px],
                         [0.0, z, py],
                         [0.0, 0.0, 1.0]])
        return view @ to_base

    # ---- Coordinate conversion ----
    def screen_to_normalized(self, pos: Sequence[float], bounds: Optional[Bounds] = None, *,
                             allow_outside: bool = False) -> Optional[Point]:
        if bounds is None:
            bounds = self.image_bounds()
        if bounds is None:
            return None
        left, top, width, height = bounds
        if width <= 0 or height <= 0:
            return None
        x = (float(pos[0]) - left) / width * 100.0
        y = (float(pos[1]) - top) / height * 100.0
        if allow_outside:
            return Point(clamp(x, 0.0, 100.0), clamp(y, 0.0, 100.0))
        # tolerate float noise at the edges
        eps = 1e-9
        if -eps <= x <= 100.0 + eps and -eps <= y <= 100.0 + eps:
            return Point(clamp(x, 0.0, 100.0), clamp(y, 0.0, 100.0))
        return None

    def normalized_to_screen(self, point: Sequence[float]) -> Optional[Tuple[float, float]]:
        m = self.view_matrix()
        if m is None:
            return None
        sx, sy, _ = m @ np.array([float(point[0]), float(point[1]), 1.0])
        return float(sx), float(sy)

    # ---- Zoom ----
    def zoom_by(self, factor: float) -> float:
        self.zoom = clamp(self.zoom * factor, ZOOM_MIN, ZOOM_MAX)
        self._apply_anchor()
        return self.zoom

    def zoom_in(self) -> float:
        return self.zoom_by(BUTTON_ZOOM_IN)

    def zoom_out(self) -> float:
        return self.zoom_by(BUTTON_ZOOM_OUT)

    def zoom_to_wheel(self, delta_y: float) -> bool:
        # delta_y > 0 = scrolling down = zoom out. Returns True when the event is consumed.
        if not self.mode.can_wheel_zoom:
            return False
        self.zoom_by(WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN)
        return True

    def reset_view(self):
        self.zoom = 1.0
        self.pan = (0.0, 0.0)
        self._pending_center = None

    # ---- Drag to pan ----
    def begin_pan(self, pos: Sequence[float]) -> bool:
        # every pointer-down starts a fresh click / drag decision
        self.drag_moved = False
        self._press_pos = (float(pos[0]), float(pos[1]))
        if not self.mode.can_pan:
            return False
        self.dragging = True
        self._drag_offset = (self._press_pos[0] - self.pan[0], self._press_pos[1] - self.pan[1])
        return True

    def update_pan(self, pos: Sequence[float]) -> bool:
        if not self.dragging:
            return False
        x, y = float(pos[0]), float(pos[1])
        if not self.drag_moved and self._press_pos is not None:
            dx = x - self._press_pos[0]; dy = y - self._press_pos[1]
            if (dx*dx + dy*dy) ** 0.5 > DRAG_THRESHOLD:
                self.drag_moved = True
        self.pan = (x - self._drag_offset[0], y - self._drag_offset[1])
        return True

    def end_pan(self) -> bool:
        # drag_moved survives until the next begin_pan so the following click can be ignored
        self.dragging = False
        return self.drag_moved

    # ---- Centering ----
    def center_on(self, point: Sequence[float], container_size: Optional[Size] = None):
        size = container_size or self.container_size
        if size is None:
            self._pending_center = Point(float(point[0]), float(point[1]))
            return
        cw, ch = size
        if cw <= 0 or ch <= 0:
            return
        z = self.zoom
        self.pan = (-((point[0] / 100.0) * cw * z - cw / 2.0),
                    -((point[1] / 100.0) * ch * z - ch / 2.0))

    def set_anchor(self, point: Optional[Sequence[float]]):
        self.anchor = Point(*point) if point is not None else None
        self._apply_anchor()

    def _apply_anchor(self):
        # Static embeds stay centered on their anchor whenever zoom or layout changes
        if self.mode.is_static and self.anchor is not None and self.container_size is not None:
            self.center_on(self.anchor)
