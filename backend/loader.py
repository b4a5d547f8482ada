# Schritt 0: Upload
# Liest CSV/Excel Dateien in ein TabularDataset.

import csv
import datetime
import logging
import os

import numpy as np
import pandas as pd

from backend.errors import FileParseError
from backend.models import TabularDataset

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".csv", ".txt", ".xlsx", ".xls")


def _to_scalar(value):
    """numpy/pandas Werte -> einfache Python Werte (JSON-fähig)."""
    if isinstance(value, (pd.Timestamp, datetime.datetime, datetime.date)):
        return value.isoformat()
    if isinstance(value, np.generic):
        return value.item()
    return value


def _detect_separator(source, sample_size=8192):
    """Trennzeichen aus den ersten Zeilen bestimmen, sonst Komma."""
    if hasattr(source, "read"):
        position = source.tell()
        sample = source.read(sample_size)
        source.seek(position)
        if isinstance(sample, bytes):
            sample = sample.decode("utf-8", errors="ignore")
    else:
        with open(source, encoding="utf-8", errors="ignore") as f:
            sample = f.read(sample_size)

    # Nur vollständige Zeilen
    if "\n" in sample:
        sample = sample[: sample.rindex("\n")]
    try:
        return csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
    except csv.Error:
        # z.B. einspaltige Datei
        return ","


def _read_csv(source) -> pd.DataFrame:
    sep = _detect_separator(source)
    # dtype=str + keep_default_na=False: leere Zellen bleiben "" statt NaN
    return pd.read_csv(source, sep=sep, dtype=str, keep_default_na=False)


def _read_excel(source, extension) -> pd.DataFrame:
    engine = "xlrd" if extension == ".xls" else "openpyxl"
    # Nur das erste Tabellenblatt
    return pd.read_excel(source, sheet_name=0, engine=engine)


def load_tabular_file(source, name=None) -> TabularDataset:
    """
    Liest eine Datei (Pfad oder Streamlit-Upload) in ein TabularDataset.

    Excel: leere Zellen fehlen im Datensatz (gelten als "kein Wert").
    CSV: alle Werte als Text, leere Zellen bleiben "".
    """
    filename = name or getattr(source, "name", None) or str(source)
    display_name = os.path.basename(filename)
    extension = os.path.splitext(filename)[1].lower()

    if extension not in SUPPORTED_EXTENSIONS:
        raise FileParseError(f"Unsupported file type: {extension or display_name}")

    try:
        if extension in (".csv", ".txt"):
            df = _read_csv(source)
        else:
            df = _read_excel(source, extension)
    except Exception as e:
        logger.warning("Could not parse %s: %s", display_name, e)
        raise FileParseError(f"Error parsing {display_name}: {e}") from e

    df.columns = [str(c).strip() for c in df.columns]

    rows = []
    for record in df.to_dict(orient="records"):
        rows.append({k: _to_scalar(v) for k, v in record.items() if not pd.isna(v)})

    logger.info("Loaded %s: %d columns, %d rows", display_name, len(df.columns), len(rows))
    return TabularDataset(name=display_name, columns=list(df.columns), rows=rows)


def get_sample_rows(rows, sample_size=3):
    """Die ersten Zeilen als Kontext für die Spaltenanalyse."""
    return [dict(r) for r in rows[: max(sample_size, 0)]]
