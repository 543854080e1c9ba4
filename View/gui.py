from PyQt6.QtWidgets import QWidget, QVBoxLayout, QSplitter, QPushButton, QComboBox, QSizePolicy
from PyQt6.QtCore import Qt

from Controller.enums import ViewportMode, DrawMode
from Controller.MapController import MapController
from Model.tomb_store import EntityStore
from .map_view import InteractiveMapWidget
from .panel import Panel


class NecropolisMapGUI(QWidget):
    def __init__(self, map_path: str | None, store: EntityStore):
        super().__init__()
        self.setWindowTitle("Necropolis Map")
        self._init_ui()
        self.controller = MapController(self, map_path, store)

    def _init_ui(self):
        self.setAutoFillBackground(True)
        self.setMinimumSize(900, 600)

        # Left: browse the plan, right: position the selected tomb
        mainSplitter = QSplitter(Qt.Orientation.Horizontal)
        self.browserPanel = Panel("Necropolis Plan")
        self.positionerPanel = Panel("Tomb Positioner")
        mainSplitter.addWidget(self.browserPanel)
        mainSplitter.addWidget(self.positionerPanel)
        mainSplitter.setStretchFactor(0, 1)
        mainSplitter.setStretchFactor(1, 1)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(mainSplitter)

        self._setup_toolbars()
        self._setup_maps()

    # ------- Helper function to build the toolBar Buttons -------
    def _setup_toolbars(self):
        self.browserPanel.add_toolbar_buttons({
            "Zoom In": self._btn("Zoom In"),
            "Zoom Out": self._btn("Zoom Out"),
            "Reset View": self._btn("Reset View"),
        })
        self.browserPanel.toolbarButtons["Reset View"].setToolTip("Back to zoom 100% and no offset.")

        self.tombSelector = QComboBox()
        self.tombSelector.setMinimumWidth(160)
        self.tombSelector.setSizePolicy(QSizePolicy.Policy.Preferred, QSizePolicy.Policy.Fixed)
        self.positionerPanel.add_toolbar_widget(self.tombSelector, label="Tomb")

        point_btn = self._btn("Point", checkable=True)
        polygon_btn = self._btn("Polygon", checkable=True)
        point_btn.setChecked(True)
        self.positionerPanel.add_toolbar_buttons({
            "Point": point_btn,
            "Polygon": polygon_btn,
            "Undo": self._btn("Undo"),
            "Clear": self._btn("Clear"),
            "Apply Shape": self._btn("Apply Shape"),
            "Zoom In": self._btn("Zoom In"),
            "Zoom Out": self._btn("Zoom Out"),
            "Reset View": self._btn("Reset View"),
        })
        tb = self.positionerPanel.toolbarButtons
        tb["Point"].setToolTip("Place the tomb as a single point: one click on the plan.")
        tb["Polygon"].setToolTip("Draw the outline of the tomb vertex by vertex. \n"
                                 "Move close to the first (green) vertex and click to close the polygon.")
        tb["Undo"].setToolTip("Remove the last vertex (Ctrl+Z).")
        tb["Clear"].setToolTip("Remove the whole shape of the tomb.")
        tb["Apply Shape"].setToolTip("Save the current shape (Enter). An open polygon is closed automatically.")
        tb["Reset View"].setToolTip("Back to zoom 100% and no offset.")

    def _setup_maps(self):
        self.browserMap = InteractiveMapWidget(ViewportMode.interactive())
        self.positionerMap = InteractiveMapWidget(ViewportMode.digitizing(DrawMode.POINT))
        self.browserPanel.set_content(self.browserMap)
        self.positionerPanel.set_content(self.positionerMap)

    @staticmethod
    def _btn(text: str, checkable: bool = False) -> QPushButton:
        btn = QPushButton(text)
        btn.setMinimumHeight(36)
        btn.setCheckable(checkable)
        return btn

    def set_draw_mode_checked(self, mode: DrawMode):
        tb = self.positionerPanel.toolbarButtons
        tb["Point"].setChecked(mode is DrawMode.POINT)
        tb["Polygon"].setChecked(mode is DrawMode.POLYGON)

    def set_shape_actions_enabled(self, has_points: bool):
        tb = self.positionerPanel.toolbarButtons
        for key in ("Undo", "Clear", "Apply Shape"):
            tb[key].setEnabled(has_points)
