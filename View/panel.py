from PyQt6.QtWidgets import (
    QFrame, QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QSizePolicy, QPushButton, QToolButton
)
from PyQt6.QtCore import Qt

class Panel(QFrame):
    def __init__(self, title: str):
        super().__init__()
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setFrameShadow(QFrame.Shadow.Raised)

        # Title
        self.titleLabel = QLabel(title)
        self.titleLabel.setContentsMargins(4, 4, 4, 4)
        self.titleLabel.setFixedHeight(20)
        self.titleLabel.setAlignment(Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft)

        # Toolbar
        self.toolbar = QWidget()
        self.toolbar.setFixedHeight(50)
        self._tbLayout = QHBoxLayout(self.toolbar)
        self._tbLayout.setContentsMargins(8, 4, 8, 4)
        self._tbLayout.setSpacing(8)
        self._tbLayout.addStretch(1)

        # Content
        self.contentArea = QWidget()
        self.contentArea.setObjectName("contentArea")
        self.contentArea.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        # Status line under the content, hidden until something is shown
        self.statusLabel = QLabel("")
        self.statusLabel.setContentsMargins(8, 4, 8, 4)
        self.statusLabel.setWordWrap(True)
        self.statusLabel.setVisible(False)

        # Build the panel layout
        v = QVBoxLayout(self)
        v.setContentsMargins(0, 0, 0, 0)
        v.setSpacing(0)
        v.addWidget(self.titleLabel)
        v.addWidget(self.toolbar)
        v.addWidget(self.contentArea)
        v.addWidget(self.statusLabel)

        # All buttons are stored in a dictionary and can be accessed later as objects
        self.toolbarButtons: dict[str, QPushButton | QToolButton] = {}

    # ---------- Public API ---------
    def add_toolbar_buttons(self, buttons: dict[str, QPushButton | QToolButton]):
        # The last item of the layout is the stretch - take away
        stretch_item = self._tbLayout.takeAt(self._tbLayout.count() - 1)

        for key, btn in buttons.items():
            if btn.minimumHeight() < 36:
                btn.setMinimumHeight(36)
            self._tbLayout.addWidget(btn)
            self.toolbarButtons[key] = btn

        # re-add the stretch
        self._tbLayout.addItem(stretch_item)

    def add_toolbar_widget(self, widget: QWidget, label: str | None = None):
        # Non-button controls (e.g. the tomb selector) go in front of the stretch as well
        stretch_item = self._tbLayout.takeAt(self._tbLayout.count() - 1)
        if label:
            lbl = QLabel(label)
            lbl.setAlignment(Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft)
            self._tbLayout.addWidget(lbl)
        widget.setMinimumHeight(36)
        self._tbLayout.addWidget(widget)
        self._tbLayout.addItem(stretch_item)

    def set_content(self, widget: QWidget):
        # Replaces the content through own widget
        layout = self.layout()
        idx = layout.indexOf(self.contentArea)
        layout.removeWidget(self.contentArea)
        self.contentArea.deleteLater()
        self.contentArea = widget
        self.contentArea.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        layout.insertWidget(idx, self.contentArea)

    def set_status(self, text: str, *, kind: str = "info"):
        colors = {"info": "#065f46", "snap": "#166534", "error": "#b91c1c"}
        self.statusLabel.setStyleSheet(f"QLabel {{ color: {colors.get(kind, colors['info'])}; }}")
        self.statusLabel.setText(text)
        self.statusLabel.setVisible(bool(text))
