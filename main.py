# main.py
import os
import sys
from pathlib import Path
from PyQt6.QtWidgets import QApplication
from PyQt6.QtGui import QIcon

from Model.tomb_store import JsonTombStore
from View.gui import NecropolisMapGUI

RESOURCES = Path(__file__).resolve().parent / "Resources"

# Plan of the necropolis and the tomb records; both can be overridden from the environment
DEFAULT_MAP = RESOURCES / "pianta_necropoli.png"
DEFAULT_DATA = RESOURCES / "tombs.json"

def main():
    app = QApplication(sys.argv)

    icon_path = RESOURCES / "Icon.ico"
    if icon_path.is_file():
        app.setWindowIcon(QIcon(str(icon_path)))

    map_path = os.environ.get("NECROPOLIS_MAP", str(DEFAULT_MAP))
    data_path = os.environ.get("NECROPOLIS_DATA", str(DEFAULT_DATA))
    print(f"[LOAD] plan={map_path} data={data_path}")

    win = NecropolisMapGUI(map_path, JsonTombStore(data_path))
    win.showMaximized()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
