import json
import os

# Widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import cv2
import numpy as np
import pytest


@pytest.fixture
def plan_png(tmp_path):
    # 400x300 plan, white with a grey frame
    img = np.full((300, 400, 3), 255, dtype=np.uint8)
    cv2.rectangle(img, (5, 5), (394, 294), (128, 128, 128), 2)
    path = tmp_path / "plan.png"
    cv2.imwrite(str(path), img)
    return str(path)


@pytest.fixture
def tombs_json(tmp_path):
    rows = [
        {
            "id": "t1",
            "Nome": "Tomba dei Leoni",
            "Numero_tomba": 1,
            "datazione": "terzo quarto VI sec. a.C.",
            "created_date": "2024-01-01T10:00:00+00:00",
            "shape_coordinates": [{"x": 50.0, "y": 50.0}],
        },
        {
            "id": "t2",
            "Numero_tomba": 2,
            "datazione": "prima metà V sec. a.C.",
            "created_date": "2024-02-01T10:00:00+00:00",
            "shape_coordinates": [
                {"x": 10.0, "y": 10.0}, {"x": 20.0, "y": 10.0},
                {"x": 20.0, "y": 20.0}, {"x": 10.0, "y": 10.0},
            ],
        },
        {
            "id": "t3",
            "Numero_tomba": 3,
            "created_date": "2023-12-01T10:00:00+00:00",
            "shape_coordinates": [],
        },
    ]
    path = tmp_path / "tombs.json"
    path.write_text(json.dumps({"tombs": rows}), encoding="utf-8")
    return str(path)
