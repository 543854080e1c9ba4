from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional

from PyQt6.QtGui import QImage

@dataclass
class MapState:
    path: Optional[str] = None
    original: Optional[QImage] = None         # base map as loaded, None if loading failed
    tombs: list[dict[str, Any]] = field(default_factory=list)
    selected_id: Optional[str] = None         # tomb currently being positioned

    def tomb(self, tomb_id: Optional[str]) -> Optional[dict[str, Any]]:
        if tomb_id is None:
            return None
        return next((t for t in self.tombs if str(t.get("id")) == str(tomb_id)), None)
