from typing import Optional, Sequence

from PyQt6.QtWidgets import QLabel
from PyQt6.QtCore import Qt, pyqtSignal, QPointF, QRectF, QTimer
from PyQt6.QtGui import (QPixmap, QPainter, QPen, QColor, QImage, QBrush, QWheelEvent, QPolygonF,
                         QFont, QFontMetrics, QKeySequence)

from Controller.enums import DrawMode, ViewportMode
from Model.annotations import TombAnnotation, HoverState, hit_test, MARKER_RADIUS
from Model.geometry import Point, clamp
from Model.viewport import ViewportController, ZOOM_MIN, ZOOM_MAX
from View.event_scope import GlobalPointerScope

# Sizes of the overlay in normalized units (percent of the image width / height)
ACTIVE_POINT_RADIUS = 0.4
VERTEX_RADIUS = 0.3
SNAP_RING_RADIUS = 0.8
MARKER_STROKE = 0.1
SHAPE_STROKE = 0.2

TOOLTIP_MAX_WIDTH = 250
TOOLTIP_PADDING = 10
PULSE_INTERVAL_MS = 450


class InteractiveMapWidget(QLabel):
    # Map of the necropolis: base image, tomb overlay, in-progress shape and hover tooltip.

    # Normalized coordinates (0..100), only emitted while digitizing
    mapClicked = pyqtSignal(float, float)
    pointerMoved = pyqtSignal(float, float)
    # id of the tomb that was clicked (never after a drag)
    annotationActivated = pyqtSignal(str)
    zoomChanged = pyqtSignal(float)
    # Keyboard shortcuts for the digitizer toolbar
    undoRequested = pyqtSignal()
    applyRequested = pyqtSignal()

    def __init__(self, mode: Optional[ViewportMode] = None, placeholder: str = "Base map not available"):
        super().__init__(placeholder)
        self.setObjectName("MapArea")
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setWordWrap(True)
        self.setMouseTracking(True)  # hover + snap need moves without a pressed button
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(200, 150)

        self._placeholder = placeholder
        self._pixmap: QPixmap | None = None
        self.viewport = ViewportController(mode)

        # Existing tombs
        self._annotations: list[TombAnnotation] = []
        self._hover = HoverState()
        self._marker_fill = QColor(220, 38, 38)
        self._marker_hover = QColor(239, 68, 68)
        self._poly_fill = QColor(220, 38, 38, 102)
        self._poly_hover = QColor(239, 68, 68, 153)
        self._poly_stroke = QColor(185, 28, 28)

        # Shape being digitized
        self._active_shape: list[Point] = []
        self._snap_target: Point | None = None
        self._active_stroke = QColor(37, 99, 235)
        self._active_fill = QColor(59, 130, 246, 77)
        self._first_vertex = QColor(74, 222, 128)
        self._snap_color = QColor(34, 197, 94)

        # Pulsing snap ring
        self._pulse_on = True
        self._pulse = QTimer(self)
        self._pulse.setInterval(PULSE_INTERVAL_MS)
        self._pulse.timeout.connect(self._toggle_pulse)

        # Drag tracking outside the widget, attached only while visible
        self._scope = GlobalPointerScope(self, self._on_global_move, self._on_global_release)
        self._update_cursor()

    # ---- Public API ----
    def set_mode(self, mode: ViewportMode):
        self.viewport.set_mode(mode)
        if mode.is_digitizing:
            self._hover.clear()  # no tooltips while digitizing
        self._update_cursor()
        self.update()

    @property
    def mode(self) -> ViewportMode:
        return self.viewport.mode

    def set_map_image(self, qimg: Optional[QImage]):
        if qimg is None or qimg.isNull():
            # keep working against the container, the caller decides how to tell the user
            self._pixmap = None
            self.viewport.set_image_size(None)
            self.setText(self._placeholder)
        else:
            self._pixmap = QPixmap.fromImage(qimg)
            self.viewport.set_image_size((self._pixmap.width(), self._pixmap.height()))
            self.setText("")
        self.updateGeometry()
        self.update()

    def set_annotations(self, annotations: Sequence[TombAnnotation]):
        self._annotations = list(annotations)
        self._hover.clear()
        self.update()

    def set_active_shape(self, points: Sequence[Sequence[float]], snap_target: Optional[Sequence[float]] = None):
        self._active_shape = [Point(float(p[0]), float(p[1])) for p in points]
        self._snap_target = Point(*snap_target) if snap_target is not None else None
        if self._snap_target is not None:
            if not self._pulse.isActive():
                self._pulse_on = True
                self._pulse.start()
        else:
            self._pulse.stop()
        self.update()

    def set_initial_view(self, zoom: float = 1.0, position: Optional[Sequence[float]] = None):
        self.viewport.zoom = clamp(float(zoom), ZOOM_MIN, ZOOM_MAX)
        self.viewport.pan = (0.0, 0.0)
        self.viewport.set_anchor(position)
        # static maps follow their anchor, the others center once (also if not laid out yet)
        if position is not None and not self.viewport.mode.is_static:
            self.viewport.center_on(position)
        self.zoomChanged.emit(self.viewport.zoom)
        self.update()

    def zoom_in(self):
        self.viewport.zoom_in()
        self.zoomChanged.emit(self.viewport.zoom)
        self.update()

    def zoom_out(self):
        self.viewport.zoom_out()
        self.zoomChanged.emit(self.viewport.zoom)
        self.update()

    def reset_view(self):
        self.viewport.reset_view()
        self.zoomChanged.emit(self.viewport.zoom)
        self.update()

    @property
    def hovered_annotation(self) -> Optional[TombAnnotation]:
        return self._hover.annotation

    @property
    def annotations(self) -> list[TombAnnotation]:
        return list(self._annotations)

    @property
    def active_shape(self) -> list[Point]:
        return list(self._active_shape)

    @property
    def snap_target(self) -> Optional[Point]:
        return self._snap_target

    @property
    def scope(self) -> GlobalPointerScope:
        return self._scope

    # ---- Mouse events ----
    def mousePressEvent(self, e):
        if e.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(e)
            return
        pos = e.position()
        if self.viewport.begin_pan((pos.x(), pos.y())):
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
        e.accept()

    def mouseMoveEvent(self, e):
        pos = e.position()
        if self.viewport.mode.is_digitizing:
            pt = self._widget_to_normalized(pos, allow_outside=True)
            if pt is not None:
                self.pointerMoved.emit(pt.x, pt.y)
        self._update_hover(pos)
        e.accept()

    def mouseReleaseEvent(self, e):
        if e.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(e)
            return
        pos = e.position()
        self.viewport.end_pan()

        if self.viewport.mode.is_digitizing:
            pt = self._widget_to_normalized(pos)
            if pt is not None:
                self.mapClicked.emit(pt.x, pt.y)
        elif not self.viewport.drag_moved:
            # a real drag never doubles as a click on a tomb
            ann = hit_test(self._annotations, self._widget_to_normalized(pos))
            if ann is not None:
                self.annotationActivated.emit(ann.id)

        self._update_cursor()
        self.update()
        e.accept()

    def leaveEvent(self, e):
        if self._hover.clear():
            self.update()
        super().leaveEvent(e)

    # Mouse Wheel = Zoom
    def wheelEvent(self, e: QWheelEvent):
        angle = e.angleDelta().y()
        if angle == 0:
            e.ignore()
            return
        # Qt: positive angle = wheel away from the user = zoom in (opposite sign to a scroll delta)
        if self.viewport.zoom_to_wheel(-angle):
            self.zoomChanged.emit(self.viewport.zoom)
            self.update()
            e.accept()  # the scroll area around the map must not scroll as well
        else:
            e.ignore()

    def keyPressEvent(self, e):
        if e.matches(QKeySequence.StandardKey.Undo):
            self.undoRequested.emit()
            e.accept()
            return
        key = e.key()
        if key in (Qt.Key.Key_Plus, Qt.Key.Key_Equal):
            self.zoom_in()
        elif key == Qt.Key.Key_Minus:
            self.zoom_out()
        elif key == Qt.Key.Key_0:
            self.reset_view()
        elif key in (Qt.Key.Key_Return, Qt.Key.Key_Enter) and self.viewport.mode.is_digitizing:
            self.applyRequested.emit()
        else:
            super().keyPressEvent(e)
            return
        e.accept()

    # ---- Global pointer scope callbacks ----
    def _on_global_move(self, pos: QPointF):
        if self.viewport.update_pan((pos.x(), pos.y())):
            self.update()

    def _on_global_release(self):
        if self.viewport.dragging:
            self.viewport.end_pan()
            self._update_cursor()
            self.update()

    # ---- Lifecycle ----
    def showEvent(self, e):
        super().showEvent(e)
        self.viewport.set_container_size(self.width(), self.height())
        self._scope.attach()

    def hideEvent(self, e):
        self._scope.detach()
        self.viewport.end_pan()
        self._pulse.stop()
        super().hideEvent(e)

    def resizeEvent(self, e):
        super().resizeEvent(e)
        self.viewport.set_container_size(self.width(), self.height())
        self.update()

    def hasHeightForWidth(self) -> bool:
        return self._pixmap is not None

    def heightForWidth(self, w: int) -> int:
        if self._pixmap is None or self._pixmap.width() <= 0:
            return super().heightForWidth(w)
        return int(round(w * self._pixmap.height() / self._pixmap.width()))

    # ---- Paint ----
    def paintEvent(self, e):
        if self._pixmap is None:
            super().paintEvent(e)  # placeholder text
        bounds = self.viewport.image_bounds()
        if bounds is None:
            return  # not laid out yet

        p = QPainter(self)
        p.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        p.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)

        left, top, w, h = bounds
        if self._pixmap is not None:
            p.drawPixmap(QRectF(left, top, w, h), self._pixmap, QRectF(self._pixmap.rect()))

        self._paint_annotations(p, w)
        if self.viewport.mode.is_digitizing:
            self._paint_active_shape(p, w)
        else:
            self._paint_tooltip(p)
        p.end()

    def _paint_annotations(self, p: QPainter, width: float):
        hovered = self._hover.annotation
        for ann in self._annotations:
            is_hover = hovered is not None and ann.id == hovered.id
            if ann.is_point:
                p.setPen(QPen(QColor(255, 255, 255), self._stroke(MARKER_STROKE, width)))
                p.setBrush(QBrush(self._marker_hover if is_hover else self._marker_fill))
                rx, ry = self._radius(MARKER_RADIUS)
                p.drawEllipse(self._to_widget(ann.shape[0]), rx, ry)
            else:
                # drawPolygon closes the outline, a stored closing vertex does no harm
                p.setPen(QPen(self._poly_stroke, self._stroke(SHAPE_STROKE, width)))
                p.setBrush(QBrush(self._poly_hover if is_hover else self._poly_fill))
                p.drawPolygon(QPolygonF([self._to_widget(pt) for pt in ann.shape]))

    def _paint_active_shape(self, p: QPainter, width: float):
        if not self._active_shape:
            return
        if self.viewport.mode.draw_mode is DrawMode.POINT:
            p.setPen(QPen(self._active_stroke, self._stroke(0.15, width)))
            p.setBrush(QBrush(QColor(59, 130, 246, 204)))
            rx, ry = self._radius(ACTIVE_POINT_RADIUS)
            p.drawEllipse(self._to_widget(self._active_shape[0]), rx, ry)
            return

        pen = QPen(self._active_stroke, self._stroke(SHAPE_STROKE, width))
        pen.setStyle(Qt.PenStyle.DashLine)
        p.setPen(pen)
        p.setBrush(QBrush(self._active_fill))
        p.drawPolygon(QPolygonF([self._to_widget(pt) for pt in self._active_shape]))

        # Vertices: the first one is green, it is the snap target
        p.setPen(QPen(self._active_stroke, self._stroke(0.15, width)))
        rx, ry = self._radius(VERTEX_RADIUS)
        for i, pt in enumerate(self._active_shape):
            p.setBrush(QBrush(self._first_vertex if i == 0 else QColor(255, 255, 255)))
            p.drawEllipse(self._to_widget(pt), rx, ry)

        if self._snap_target is not None:
            ring = QColor(self._snap_color)
            ring.setAlpha(255 if self._pulse_on else 110)
            p.setPen(QPen(ring, self._stroke(SHAPE_STROKE, width)))
            p.setBrush(Qt.BrushStyle.NoBrush)
            rx, ry = self._radius(SNAP_RING_RADIUS)
            p.drawEllipse(self._to_widget(self._snap_target), rx, ry)

    def _paint_tooltip(self, p: QPainter):
        ann = self._hover.annotation
        if ann is None:
            return
        x, y = self._hover.tooltip_pos
        title_font = QFont(self.font())
        title_font.setBold(True)
        fm_title = QFontMetrics(title_font)
        fm = QFontMetrics(self.font())

        inner = TOOLTIP_MAX_WIDTH - 2 * TOOLTIP_PADDING
        title = fm_title.elidedText(ann.label, Qt.TextElideMode.ElideRight, inner)
        date = fm.elidedText(ann.date, Qt.TextElideMode.ElideRight, inner) if ann.date else ""
        text_w = max(fm_title.horizontalAdvance(title), fm.horizontalAdvance(date) if date else 0)
        box_w = text_w + 2 * TOOLTIP_PADDING
        box_h = fm_title.height() + (fm.height() if date else 0) + 2 * TOOLTIP_PADDING

        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(QBrush(QColor(255, 255, 255, 242)))
        p.drawRoundedRect(QRectF(x, y, box_w, box_h), 8, 8)

        p.setFont(title_font)
        p.setPen(QColor(17, 24, 39))
        p.drawText(QPointF(x + TOOLTIP_PADDING, y + TOOLTIP_PADDING + fm_title.ascent()), title)
        if date:
            p.setFont(self.font())
            p.setPen(QColor(75, 85, 99))
            p.drawText(QPointF(x + TOOLTIP_PADDING, y + TOOLTIP_PADDING + fm_title.height() + fm.ascent()), date)

    # ---- Helpers ----
    def _to_widget(self, pt: Sequence[float]) -> QPointF:
        xy = self.viewport.normalized_to_screen(pt)
        if xy is None:
            return QPointF()
        return QPointF(xy[0], xy[1])

    def _widget_to_normalized(self, pos: QPointF, *, allow_outside: bool = False) -> Optional[Point]:
        return self.viewport.screen_to_normalized((pos.x(), pos.y()), allow_outside=allow_outside)

    def _radius(self, r_norm: float) -> tuple[float, float]:
        bounds = self.viewport.image_bounds()
        if bounds is None:
            return 0.0, 0.0
        return r_norm / 100.0 * bounds[2], r_norm / 100.0 * bounds[3]

    @staticmethod
    def _stroke(w_norm: float, width: float) -> float:
        # never thinner than one device pixel
        return max(1.0, w_norm / 100.0 * width)

    def _update_hover(self, pos: QPointF):
        if self.viewport.mode.is_digitizing:
            return
        ann = hit_test(self._annotations, self._widget_to_normalized(pos))
        changed = self._hover.update(ann, (pos.x(), pos.y()))
        if changed or ann is not None:
            self.update()

    def _update_cursor(self):
        mode = self.viewport.mode
        if mode.is_digitizing:
            self.setCursor(Qt.CursorShape.CrossCursor)
        elif self.viewport.dragging:
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
        elif mode.can_pan:
            self.setCursor(Qt.CursorShape.OpenHandCursor)
        else:
            self.setCursor(Qt.CursorShape.ArrowCursor)

    def _toggle_pulse(self):
        self._pulse_on = not self._pulse_on
        self.update()
