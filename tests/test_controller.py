import pytest
from PyQt6.QtWidgets import QApplication

from Controller.enums import DrawMode
from Model.tomb_store import JsonTombStore, StoreError
from View.detail_dialogue import TombDetailDialog
from View.gui import NecropolisMapGUI


@pytest.fixture
def gui(qtbot, plan_png, tombs_json):
    win = NecropolisMapGUI(plan_png, JsonTombStore(tombs_json))
    qtbot.addWidget(win)
    return win


def _select(gui, tomb_id):
    sel = gui.tombSelector
    sel.setCurrentIndex(sel.findData(tomb_id))
    assert gui.controller.state.selected_id == tomb_id


def _status(gui):
    return gui.positionerPanel.statusLabel.text()


def test_startup_loads_plan_and_tombs(gui):
    c = gui.controller
    assert c.state.original is not None
    assert (c.state.original.width(), c.state.original.height()) == (400, 300)
    # t3 has no shape and is not drawn
    assert sorted(a.id for a in gui.browserMap.annotations) == ["t1", "t2"]
    labels = [gui.tombSelector.itemText(i) for i in range(gui.tombSelector.count())]
    assert labels == ["Tomba 2", "Tomba dei Leoni", "Tomba 3"]
    # newest first, its stored polygon is loaded into the polygon tool
    assert c.state.selected_id == "t2"
    assert c.session.mode is DrawMode.POLYGON
    assert len(c.session.points) == 4


def test_missing_plan_is_reported(qtbot, tmp_path, tombs_json):
    win = NecropolisMapGUI(str(tmp_path / "missing.png"), JsonTombStore(tombs_json))
    qtbot.addWidget(win)
    assert win.controller.state.original is None
    assert "could not be loaded" in win.browserPanel.statusLabel.text()
    assert win.browserMap.text() == "Base map not available"


def test_point_placement_is_saved(gui, tombs_json):
    _select(gui, "t3")
    gui.controller.set_draw_mode(DrawMode.POINT)
    gui.positionerMap.mapClicked.emit(12.3456, 45.6789)
    stored = JsonTombStore(tombs_json).get("t3")["shape_coordinates"]
    assert stored == [{"x": 12.35, "y": 45.68}]
    assert "saved" in _status(gui)
    assert "t3" in [a.id for a in gui.browserMap.annotations]


def test_polygon_snap_close_is_saved(gui, tombs_json):
    _select(gui, "t3")
    gui.controller.set_draw_mode(DrawMode.POLYGON)
    m = gui.positionerMap
    for x, y in [(10, 10), (20, 10), (20, 20)]:
        m.mapClicked.emit(x, y)
    assert JsonTombStore(tombs_json).get("t3")["shape_coordinates"] == []

    m.pointerMoved.emit(11.5, 10.0)
    assert m.snap_target == (10, 10)
    assert _status(gui).startswith("Snapped")

    m.mapClicked.emit(11.5, 10.0)
    stored = JsonTombStore(tombs_json).get("t3")["shape_coordinates"]
    assert stored == [{"x": 10.0, "y": 10.0}, {"x": 20.0, "y": 10.0},
                      {"x": 20.0, "y": 20.0}, {"x": 10.0, "y": 10.0}]
    assert m.snap_target is None


def test_apply_closes_open_polygon(gui, tombs_json):
    _select(gui, "t3")
    gui.controller.set_draw_mode(DrawMode.POLYGON)
    for x, y in [(30, 30), (40, 30), (40, 40)]:
        gui.positionerMap.mapClicked.emit(x, y)
    gui.positionerMap.applyRequested.emit()
    stored = JsonTombStore(tombs_json).get("t3")["shape_coordinates"]
    assert len(stored) == 4
    assert stored[0] == stored[-1]


def test_undo_button(gui):
    _select(gui, "t3")
    gui.controller.set_draw_mode(DrawMode.POLYGON)
    gui.positionerMap.mapClicked.emit(30, 30)
    gui.positionerMap.mapClicked.emit(40, 30)
    gui.positionerPanel.toolbarButtons["Undo"].click()
    assert gui.positionerMap.active_shape == [(30, 30)]


def test_clear_removes_stored_shape(gui, tombs_json):
    _select(gui, "t1")
    gui.positionerPanel.toolbarButtons["Clear"].click()
    assert JsonTombStore(tombs_json).get("t1")["shape_coordinates"] == []
    assert "removed" in _status(gui)
    assert "t1" not in [a.id for a in gui.browserMap.annotations]
    assert not gui.positionerPanel.toolbarButtons["Undo"].isEnabled()


def test_mode_buttons_reset_the_shape(gui):
    _select(gui, "t2")
    assert gui.controller.session.points
    gui.positionerPanel.toolbarButtons["Point"].click()
    assert gui.controller.session.mode is DrawMode.POINT
    assert gui.controller.session.points == []
    assert gui.positionerPanel.toolbarButtons["Point"].isChecked()
    assert not gui.positionerPanel.toolbarButtons["Polygon"].isChecked()


def test_open_detail(gui):
    dlg = gui.controller.open_detail("t2")
    assert dlg is not None
    assert dlg.map.mode.is_static
    assert dlg.map.viewport.zoom == 3.0
    # centroid of the stored ring, closing vertex included
    assert dlg.map.viewport.anchor == pytest.approx((15.0, 12.5))
    dlg.close()


def test_open_detail_unknown_or_without_shape(gui):
    assert gui.controller.open_detail("nope") is None
    assert gui.controller.open_detail("t3") is None


def test_browser_click_opens_detail(gui):
    gui.browserMap.annotationActivated.emit("t1")
    dialogs = [w for w in QApplication.topLevelWidgets()
               if isinstance(w, TombDetailDialog) and w.isVisible()]
    assert [d.annotation.id for d in dialogs] == ["t1"]
    for d in dialogs:
        d.close()


class _FailingStore(JsonTombStore):
    def update(self, record_id, payload):
        raise StoreError("read-only")


def test_store_error_is_reported(qtbot, plan_png, tombs_json):
    win = NecropolisMapGUI(plan_png, _FailingStore(tombs_json))
    qtbot.addWidget(win)
    win.controller.set_draw_mode(DrawMode.POINT)
    win.positionerMap.mapClicked.emit(5.0, 5.0)
    assert "Could not save the shape" in _status(win)


def test_shape_without_selection(qtbot, plan_png, tmp_path):
    win = NecropolisMapGUI(plan_png, JsonTombStore(str(tmp_path / "empty.json")))
    qtbot.addWidget(win)
    assert win.controller.state.selected_id is None
    win.positionerMap.mapClicked.emit(5.0, 5.0)
    assert "No tomb selected" in _status(win)


def test_closed_detail_dialogs_are_released(qtbot, gui):
    for _ in range(5):
        dlg = gui.controller.open_detail("t1")
        assert dlg is not None
        dlg.close()
    qtbot.waitUntil(lambda: not gui.findChildren(TombDetailDialog), timeout=1000)


def test_positioner_zoom_buttons(gui):
    b = gui.positionerPanel.toolbarButtons
    b["Zoom In"].click()
    assert gui.positionerMap.viewport.zoom == pytest.approx(1.5)
    b["Zoom Out"].click()
    assert gui.positionerMap.viewport.zoom == pytest.approx(1.125)
    b["Reset View"].click()
    assert gui.positionerMap.viewport.zoom == 1.0
    # the browser map is not affected
    assert gui.browserMap.viewport.zoom == 1.0
