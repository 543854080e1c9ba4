import os

import cv2
import numpy as np
from PyQt6.QtGui import QImage

def numpy_rgb_to_qimage(rgb: np.ndarray) -> QImage:
    h, w, _ = rgb.shape
    rgb = np.ascontiguousarray(rgb)
    # QImage darf nicht auf flüchtigen Speicher zeigen -> copy()
    qimg = QImage(
        rgb.data, w, h, 3 * w,
        QImage.Format.Format_RGB888
    ).copy()
    return qimg

def load_base_image(path):
    """
    Lädt die Pianta der Nekropole mit OpenCV.
    Gibt das QImage zurück, oder None wenn das Bild fehlt / nicht lesbar ist.
    """
    if not path or not os.path.isfile(path):
        print(f"[LOAD] Base image not found: {path}")
        return None

    bgr = cv2.imread(path, cv2.IMREAD_COLOR)
    if bgr is None:
        print(f"[LOAD] Could not decode base image: {path}")
        return None

    rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)  # HxWx3, uint8
    return numpy_rgb_to_qimage(rgb)
