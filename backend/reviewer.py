# Schritt 2: Zuordnungen prüfen
# Umwandlung zwischen den Vorschlägen und der editierbaren Tabelle in der UI.

import pandas as pd

from backend.models import Correspondence

TABLE_COLUMNS = ["Übernehmen", "Spalte Datei 1", "Spalte Datei 2", "Name im Ergebnis", "Konfidenz", "Begründung"]


def _cell_text(value):
    # Geleerte Zellen kommen aus st.data_editor als None oder NaN zurück
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def mappings_to_table(correspondences) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "Übernehmen": True,
            "Spalte Datei 1": c.column_a,
            "Spalte Datei 2": c.column_b,
            "Name im Ergebnis": c.merged_name,
            "Konfidenz": round(c.confidence, 2),
            "Begründung": c.rationale
        }
        for c in correspondences
    ], columns=TABLE_COLUMNS)


def table_to_mappings(df: pd.DataFrame):
    """Nur angehakte Zeilen werden übernommen."""
    accepted = []
    for _, row in df.iterrows():
        flag = row["Übernehmen"]
        if pd.isna(flag) or not flag:
            continue
        confidence = row["Konfidenz"]
        accepted.append(Correspondence(
            column_a=row["Spalte Datei 1"],
            column_b=row["Spalte Datei 2"],
            merged_name=_cell_text(row["Name im Ergebnis"]),
            confidence=0.0 if pd.isna(confidence) else float(confidence),
            rationale=_cell_text(row["Begründung"])
        ))
    return accepted
