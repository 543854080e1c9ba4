from PyQt6.QtWidgets import QDialog, QLabel, QVBoxLayout, QPlainTextEdit
from PyQt6.QtGui import QImage, QFont
from PyQt6.QtCore import Qt

from Controller.enums import ViewportMode
from Model.annotations import TombAnnotation
from Model.geometry import centroid
from View.map_view import InteractiveMapWidget

DETAIL_ZOOM = 3.0
DETAIL_MAP_WIDTH = 480

class TombDetailDialog(QDialog):
    """
    Detail view of one tomb:
    - label + date
    - static map (no pan / wheel), zoom 3, centered on the centroid of the tomb shape
    - the stored coordinates, read-only
    """
    def __init__(self, parent, qimg_map: QImage | None, annotation: TombAnnotation):
        super().__init__(parent)
        self.setWindowTitle(annotation.label)
        self.annotation = annotation

        self._title = QLabel(annotation.label)
        f = QFont(self._title.font())
        f.setBold(True)
        f.setPointSizeF(f.pointSizeF() * 1.3)
        self._title.setFont(f)
        self._date = QLabel(annotation.date or "-")

        # Static embed, opens already centered on the tomb
        self.map = InteractiveMapWidget(ViewportMode.static())
        self.map.set_map_image(qimg_map)
        self.map.set_annotations([annotation])
        self.map.setFixedWidth(DETAIL_MAP_WIDTH)
        if qimg_map is not None and not qimg_map.isNull() and qimg_map.width() > 0:
            self.map.setFixedHeight(int(round(DETAIL_MAP_WIDTH * qimg_map.height() / qimg_map.width())))
        else:
            self.map.setFixedHeight(int(DETAIL_MAP_WIDTH * 0.75))
        self.map.set_initial_view(DETAIL_ZOOM, centroid(annotation.shape))

        self._coords = QPlainTextEdit()
        self._coords.setReadOnly(True)
        self._coords.setMaximumHeight(90)
        self._coords.setPlainText(
            "  ".join(f"({p.x:.2f}, {p.y:.2f})" for p in annotation.shape)
        )

        lay = QVBoxLayout(self)
        lay.addWidget(self._title)
        lay.addWidget(self._date)
        lay.addWidget(self.map, alignment=Qt.AlignmentFlag.AlignHCenter)
        lay.addWidget(QLabel("Coordinates (% of the plan)"))
        lay.addWidget(self._coords)
