# Model/tomb_store.py
from __future__ import annotations
import json
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

Record = Dict[str, Any]

# Enumerations offered by the tomb form
TOMB_SCHEMA: Dict[str, Any] = {
    "properties": {
        "datazione": {
            "enum": [
                "terzo quarto VII sec. a.C.",
                "ultimo quarto VII sec. a.C.",
                "seconda metà VII sec. a.C.",
                "primo quarto VI sec. a.C.",
                "secondo quarto VI sec. a.C.",
                "terzo quarto VI sec. a.C.",
                "ultimo quarto VI sec. a.C.",
                "prima metà VI sec. a.C.",
                "seconda metà VI sec. a.C.",
                "primo quarto V sec. a.C.",
                "secondo quarto V sec. a.C.",
                "terzo quarto V sec. a.C.",
                "ultimo quarto V sec. a.C.",
                "prima metà V sec. a.C.",
                "seconda metà V sec. a.C.",
            ]
        },
        "tipologia_tomba": {"enum": ["tomba a camera", "tomba a cassetta", "tomba a fossa"]},
        "sottotipo_copertura": {"enum": ["a doppio spiovente", "a volta", "a lastroni", "mista"]},
        "sottotipo_banchine": {"enum": ["tre banchine", "due banchine", "banchina unica"]},
        "sottotipo_cassetta": {"enum": ["in blocchi di tufo", "in lastre di tufo"]},
        "condizione_conservazione": {"enum": ["Ottima", "Buona", "Discreta", "Parziale", "Frammentaria"]},
    }
}


class StoreError(Exception):
    """Raised when the entity store rejects a request or cannot be read."""


class EntityStore(Protocol):
    # Interface of the remote table the map reads tombs from and writes shapes to
    def list(self, order_by: Optional[str] = "-created_date", limit: Optional[int] = None) -> List[Record]: ...
    def get(self, record_id: str) -> Optional[Record]: ...
    def create(self, payload: Record) -> Record: ...
    def update(self, record_id: str, payload: Record) -> Record: ...
    def delete(self, record_id: str) -> bool: ...
    def schema(self) -> Dict[str, Any]: ...


class JsonTombStore:
    """
    Lokaler Ersatz für die Tombs-Tabelle: eine JSON-Datei {"tombs": [...]}.
    Jeder Aufruf liest / schreibt die ganze Datei.
    """

    def __init__(self, path: str):
        self.path = path

    # ---- Public API ----
    def list(self, order_by: Optional[str] = "-created_date", limit: Optional[int] = None) -> List[Record]:
        rows = self._read()
        if order_by:
            desc = order_by.startswith("-")
            field = order_by[1:] if desc else order_by
            # records without the field sort last in both directions
            present = [r for r in rows if r.get(field) is not None]
            missing = [r for r in rows if r.get(field) is None]
            present.sort(key=lambda r: r[field], reverse=desc)
            rows = present + missing
        if limit:
            rows = rows[:limit]
        return rows

    def get(self, record_id: str) -> Optional[Record]:
        return next((r for r in self._read() if str(r.get("id")) == str(record_id)), None)

    def create(self, payload: Record) -> Record:
        rows = self._read()
        record = dict(payload)
        record.setdefault("id", uuid.uuid4().hex)
        record.setdefault("created_date", datetime.now(timezone.utc).isoformat())
        if any(str(r.get("id")) == str(record["id"]) for r in rows):
            raise StoreError(f"duplicate id {record['id']!r}")
        rows.append(record)
        self._write(rows)
        return dict(record)

    def update(self, record_id: str, payload: Record) -> Record:
        rows = self._read()
        idx = self._index_of(rows, record_id)
        record = dict(rows[idx])
        record.update(payload)
        record["id"] = rows[idx].get("id")  # the id is not updatable
        rows[idx] = record
        self._write(rows)
        return dict(record)

    def delete(self, record_id: str) -> bool:
        rows = self._read()
        idx = self._index_of(rows, record_id)
        del rows[idx]
        self._write(rows)
        return True

    def schema(self) -> Dict[str, Any]:
        return TOMB_SCHEMA

    # ---- Helpers ----
    @staticmethod
    def _index_of(rows: List[Record], record_id: str) -> int:
        for i, r in enumerate(rows):
            if str(r.get("id")) == str(record_id):
                return i
        raise StoreError(f"no tomb with id {record_id!r}")

    def _read(self) -> List[Record]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"cannot read {self.path}: {e}") from e
        rows = data.get("tombs") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            raise StoreError(f"{self.path} has no 'tombs' list")
        return rows

    def _write(self, rows: List[Record]):
        tmp = self.path + ".tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump({"tombs": rows}, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StoreError(f"cannot write {self.path}: {e}") from e
        print(f"[STORE] wrote {len(rows)} tombs to {self.path}")
