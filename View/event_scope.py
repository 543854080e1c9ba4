from typing import Callable

from PyQt6.QtCore import QObject, QEvent, QPointF, Qt
from PyQt6.QtWidgets import QApplication, QWidget


class GlobalPointerScope(QObject):
    """
    Application-wide pointer-move / left-button-release subscription owned by one map widget.

    attach() installs the filter on the QApplication, detach() removes it again. The owning
    widget attaches on show and detaches on hide, so a map that is no longer on screen cannot
    keep feeding drag state into the next one. Events are only observed, never consumed.
    """

    def __init__(self, owner: QWidget, on_move: Callable[[QPointF], None], on_release: Callable[[], None]):
        super().__init__(owner)  # deleted together with the owner
        self._owner = owner
        self._on_move = on_move
        self._on_release = on_release
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def attach(self):
        if self._active:
            return
        app = QApplication.instance()
        if app is None:
            return
        app.installEventFilter(self)
        self._active = True

    def detach(self):
        if not self._active:
            return
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self)
        self._active = False

    def __enter__(self):
        self.attach()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.detach()
        return False

    def eventFilter(self, obj, event):
        t = event.type()
        if t == QEvent.Type.MouseMove:
            # widget-local position, also when the pointer left the widget during a drag
            self._on_move(self._owner.mapFromGlobal(event.globalPosition()))
        elif t == QEvent.Type.MouseButtonRelease and event.button() == Qt.MouseButton.LeftButton:
            self._on_release()
        return False
