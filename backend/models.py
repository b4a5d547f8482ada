# Datenmodell
# Tabellen, Spaltenzuordnungen und das Merge-Ergebnis.
# Die to_dict/from_dict Methoden benutzen das JSON-Format der API (headers, data, column1, ...).

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from backend.errors import InputValidationError

# Platzhalter für "kein Wert, weil die Zeile aus der anderen Datei stammt".
# Leere Werte aus der Quelldatei bleiben "" und sind damit unterscheidbar.
NO_VALUE = None


@dataclass
class TabularDataset:
    name: str
    columns: List[str]
    rows: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "headers": list(self.columns),
            "data": [dict(r) for r in self.rows],
            "rowCount": self.row_count,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TabularDataset":
        """Baut ein Dataset aus dem Request-Payload. rowCount wird ignoriert und neu berechnet."""
        if not isinstance(payload, dict):
            raise InputValidationError("File payload must be an object")

        headers = payload.get("headers")
        data = payload.get("data") or []
        if not isinstance(headers, list):
            raise InputValidationError("File headers must be an array")
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise InputValidationError("File data must be an array of objects")

        return cls(
            name=str(payload.get("name") or ""),
            columns=[str(h) for h in headers],
            rows=data,
        )


@dataclass
class Correspondence:
    column_a: str
    column_b: str
    merged_name: str
    confidence: float = 1.0
    rationale: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column1": self.column_a,
            "column2": self.column_b,
            "confidence": self.confidence,
            "reason": self.rationale,
            "mergedName": self.merged_name,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Correspondence":
        if not isinstance(payload, dict):
            raise InputValidationError("Each mapping must be an object")

        missing = [k for k in ("column1", "column2", "mergedName") if not isinstance(payload.get(k), str)]
        if missing:
            raise InputValidationError(f"Mapping is missing fields: {', '.join(missing)}")

        try:
            confidence = float(payload.get("confidence", 1.0))
        except (TypeError, ValueError):
            raise InputValidationError("Mapping confidence must be a number")

        return cls(
            column_a=payload["column1"],
            column_b=payload["column2"],
            merged_name=payload["mergedName"],
            confidence=confidence,
            rationale=str(payload.get("reason") or ""),
        )


@dataclass
class MappingProposal:
    correspondences: List[Correspondence] = field(default_factory=list)
    unmatched_a: List[str] = field(default_factory=list)
    unmatched_b: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mappings": [c.to_dict() for c in self.correspondences],
            "unmatchedColumns1": list(self.unmatched_a),
            "unmatchedColumns2": list(self.unmatched_b),
        }


@dataclass
class MergedDataset:
    columns: List[str]
    rows: List[Dict[str, Any]]
    correspondences: List[Correspondence] = field(default_factory=list)
    source_names: List[str] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headers": list(self.columns),
            "data": [dict(r) for r in self.rows],
            "mappings": [c.to_dict() for c in self.correspondences],
            "rowCount": self.row_count,
            "sourceFiles": list(self.source_names),
        }

    def to_dataframe(self, limit: Optional[int] = None) -> pd.DataFrame:
        """DataFrame in Spaltenreihenfolge des Ergebnisses (für Vorschau und Export)."""
        rows = self.rows if limit is None else self.rows[:limit]
        # dtype=object, sonst wird 30 neben None zu 30.0
        return pd.DataFrame(rows, columns=self.columns, dtype=object)
