# Schritt 4: Export
# Merge-Ergebnis als CSV für den Download.

import time

from backend.models import MergedDataset

CSV_SEPARATOR = ","


def export_to_csv(merged: MergedDataset, sep: str = CSV_SEPARATOR) -> str:
    """Kopfzeile = merged.columns, NO_VALUE wird zum leeren Feld."""
    return merged.to_dataframe().to_csv(index=False, sep=sep, na_rep="")


def export_to_csv_bytes(merged: MergedDataset, sep: str = CSV_SEPARATOR) -> bytes:
    return export_to_csv(merged, sep=sep).encode("utf-8")


def build_download_filename(prefix: str = "merged") -> str:
    return f"{prefix}_{int(time.time() * 1000)}.csv"
