from __future__ import annotations
from typing import Optional

from PyQt6.QtCore import QObject, Qt

from Controller.enums import DrawMode, ViewportMode
from Model.annotations import annotation_from_record, annotations_from_records, shape_from_records, \
    shape_to_records, tomb_label
from Model.digitizer import DrawingSession
from Model.image_ops import load_base_image
from Model.map_state import MapState
from Model.tomb_store import EntityStore, StoreError
from View.detail_dialogue import TombDetailDialog


# --- Controller ---
class MapController(QObject):
    def __init__(self, view, map_path: Optional[str], store: EntityStore):
        super().__init__()
        self.view = view  # References the main window: both maps, panels, buttons and the tomb selector
        self.store = store  # Where tomb records come from and where finished shapes go

        self.state = MapState(path=map_path)
        # The digitizer reports every finished shape (point placed, polygon closed, apply, clear)
        self.session = DrawingSession(on_shape_change=self._on_shape_change)
        # Message of the last save, shown once instead of the drawing hint
        self._pending_status: tuple[str, str] | None = None

        self._wire_view()
        self.load_map(map_path)
        self.reload_tombs()
        self._sync_positioner()

    # Wiring - connecting the view (widgets, buttons) with the logic
    def _wire_view(self):
        v = self.view

        # Browser map: zoom buttons + click on a tomb opens its detail view
        b = v.browserPanel.toolbarButtons
        b["Zoom In"].clicked.connect(lambda: v.browserMap.zoom_in())
        b["Zoom Out"].clicked.connect(lambda: v.browserMap.zoom_out())
        b["Reset View"].clicked.connect(lambda: v.browserMap.reset_view())
        v.browserMap.annotationActivated.connect(self.open_detail)

        # Positioner toolbar
        p = v.positionerPanel.toolbarButtons
        p["Point"].clicked.connect(lambda: self.set_draw_mode(DrawMode.POINT))
        p["Polygon"].clicked.connect(lambda: self.set_draw_mode(DrawMode.POLYGON))
        p["Undo"].clicked.connect(lambda: self.undo())
        p["Clear"].clicked.connect(lambda: self.clear())
        p["Apply Shape"].clicked.connect(lambda: self.apply())
        p["Zoom In"].clicked.connect(lambda: v.positionerMap.zoom_in())
        p["Zoom Out"].clicked.connect(lambda: v.positionerMap.zoom_out())
        p["Reset View"].clicked.connect(lambda: v.positionerMap.reset_view())
        v.tombSelector.currentIndexChanged.connect(self._on_tomb_selected)

        # Positioner map: clicks place vertices, moves drive the snap target
        v.positionerMap.mapClicked.connect(self._on_map_click)
        v.positionerMap.pointerMoved.connect(self._on_pointer_move)
        v.positionerMap.undoRequested.connect(self.undo)
        v.positionerMap.applyRequested.connect(self.apply)

    # ---- Loading ----
    def load_map(self, path: Optional[str]):
        qimg = load_base_image(path)
        self.state.path = path
        self.state.original = qimg
        self.view.browserMap.set_map_image(qimg)
        self.view.positionerMap.set_map_image(qimg)
        if qimg is None:
            self.view.browserPanel.set_status(f"The plan could not be loaded: {path}", kind="error")
        else:
            self.view.browserPanel.set_status("")

    def reload_tombs(self):
        try:
            rows = self.store.list()
        except StoreError as e:
            print(f"[STORE] list failed: {e}")
            self._set_status_text(f"Could not load the tombs: {e}", kind="error")
            rows = []
        self.state.tombs = rows
        self.view.browserMap.set_annotations(annotations_from_records(rows))

        # Refill the selector without losing the selection
        sel = self.view.tombSelector
        previous = self.state.selected_id
        sel.blockSignals(True)
        sel.clear()
        for r in rows:
            sel.addItem(tomb_label(r), str(r.get("id")))
        idx = sel.findData(previous) if previous is not None else -1
        sel.setCurrentIndex(idx if idx >= 0 else (0 if rows else -1))
        sel.blockSignals(False)

        if sel.currentData() != previous:
            self._on_tomb_selected(sel.currentIndex())

    def _on_tomb_selected(self, index: int):
        tomb_id = self.view.tombSelector.itemData(index) if index >= 0 else None
        self.state.selected_id = tomb_id
        record = self.state.tomb(tomb_id)
        try:
            pts = shape_from_records(record.get("shape_coordinates")) if record else []
        except ValueError as e:
            print(f"[MAP] invalid stored shape for {tomb_id!r}: {e}")
            self._pending_status = (f"The stored shape is invalid and was ignored: {e}", "error")
            pts = []

        # Show the stored shape in the tool that made it
        if len(pts) > 1:
            mode = DrawMode.POLYGON
        elif len(pts) == 1:
            mode = DrawMode.POINT
        else:
            mode = self.session.mode
        if mode is not self.session.mode:
            self._apply_draw_mode(mode)
        self.session.load(pts)
        self._sync_positioner()

    # ---- Drawing ----
    def set_draw_mode(self, mode: DrawMode):
        self._apply_draw_mode(mode)
        self._sync_positioner()

    def _apply_draw_mode(self, mode: DrawMode):
        self.session.set_mode(mode)
        self.view.positionerMap.set_mode(ViewportMode.digitizing(mode))
        self.view.set_draw_mode_checked(mode)

    def _on_map_click(self, x: float, y: float):
        self.session.click(x, y)
        self._sync_positioner()

    def _on_pointer_move(self, x: float, y: float):
        before = self.session.snap_target
        after = self.session.pointer_move(x, y)
        if after != before:
            self._sync_positioner()

    def undo(self):
        if self.session.undo():
            self._sync_positioner()

    def clear(self):
        self.session.clear()
        self._sync_positioner()

    def apply(self):
        if self.session.save() is None:
            self._set_status_text("Nothing to apply - draw a point or a polygon first.", kind="error")
            return
        self._sync_positioner()

    # ---- Persisting ----
    def _on_shape_change(self, points):
        tomb_id = self.state.selected_id
        if tomb_id is None:
            self._pending_status = ("No tomb selected - the shape was not saved.", "error")
            return
        try:
            self.store.update(tomb_id, {"shape_coordinates": shape_to_records(points)})
        except StoreError as e:
            print(f"[STORE] update of {tomb_id!r} failed: {e}")
            self._pending_status = (f"Could not save the shape: {e}", "error")
            return

        label = tomb_label(self.state.tomb(tomb_id) or {})
        if points:
            self._pending_status = (f"Shape of {label} saved ({len(points)} points).", "info")
        else:
            self._pending_status = (f"Shape of {label} removed.", "info")
        self.reload_tombs()

    # ---- Detail view ----
    def open_detail(self, tomb_id: str) -> Optional[TombDetailDialog]:
        record = self.state.tomb(tomb_id)
        if record is None:
            print(f"[MAP] unknown tomb {tomb_id!r}")
            return None
        try:
            ann = annotation_from_record(record)
        except ValueError as e:
            print(f"[MAP] invalid stored shape for {tomb_id!r}: {e}")
            ann = None
        if ann is None:
            return None
        dlg = TombDetailDialog(self.view, self.state.original, ann)
        # gone after close, together with its map, timer and pointer scope
        dlg.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)
        dlg.show()
        return dlg

    # ---- View sync ----
    def _sync_positioner(self):
        s = self.session
        self.view.positionerMap.set_active_shape(s.points, s.snap_target)
        self.view.set_shape_actions_enabled(bool(s.points))
        if self._pending_status is not None:
            text, kind = self._pending_status
            self._pending_status = None
            self._set_status_text(text, kind=kind)
        elif s.snap_target is not None:
            self._set_status_text(s.status_text(), kind="snap")
        else:
            self._set_status_text(s.status_text())

    def _set_status_text(self, msg: str, *, kind: str = "info"):
        self.view.positionerPanel.set_status(msg, kind=kind)
