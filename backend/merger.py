# Schritt 3: Merge
# Zusammenführen zweier Tabellen anhand der bestätigten Spaltenzuordnungen.

import logging
from typing import List

from backend.errors import MappingConflictError
from backend.models import NO_VALUE, Correspondence, MergedDataset, TabularDataset

logger = logging.getLogger(__name__)


def validate_correspondences(dataset_a: TabularDataset, dataset_b: TabularDataset, correspondences: List[Correspondence]):
    """
    Prüft die Zuordnungen vor dem Merge und sammelt alle Probleme.

    Abgelehnt werden unbekannte Spalten, mehrfach verwendete Quellspalten,
    leere oder doppelte Zielnamen, Zielnamen, die mit einer nicht
    zugeordneten Spalte einer der beiden Dateien kollidieren, und gleich
    benannte Spalten beider Dateien ohne Zuordnung.
    """
    problems = []
    columns_a = set(dataset_a.columns)
    columns_b = set(dataset_b.columns)
    used_a = set()
    used_b = set()
    merged_names = set()

    for corr in correspondences:
        if corr.column_a not in columns_a:
            problems.append(f"Column '{corr.column_a}' does not exist in {dataset_a.name or 'file 1'}")
        if corr.column_b not in columns_b:
            problems.append(f"Column '{corr.column_b}' does not exist in {dataset_b.name or 'file 2'}")

        if corr.column_a in used_a:
            problems.append(f"Column '{corr.column_a}' from file 1 is mapped more than once")
        if corr.column_b in used_b:
            problems.append(f"Column '{corr.column_b}' from file 2 is mapped more than once")
        used_a.add(corr.column_a)
        used_b.add(corr.column_b)

        if not corr.merged_name.strip():
            problems.append(f"Mapping '{corr.column_a}' -> '{corr.column_b}' has an empty merged name")
        elif corr.merged_name in merged_names:
            problems.append(f"Merged name '{corr.merged_name}' is used by more than one mapping")
        merged_names.add(corr.merged_name)

    # Kollision mit Spalten, die unverändert übernommen werden
    unmapped_a = [c for c in dataset_a.columns if c not in used_a]
    unmapped_b = [c for c in dataset_b.columns if c not in used_b]
    for name in sorted(merged_names.intersection(unmapped_a + unmapped_b)):
        problems.append(f"Merged name '{name}' collides with an unmapped column")

    # Gleicher Spaltenname in beiden Dateien ohne Zuordnung: B würde die Werte aus A überschreiben
    for name in sorted(set(unmapped_a).intersection(unmapped_b)):
        problems.append(f"Column '{name}' exists in both files but is not mapped")

    if problems:
        logger.info("Rejected %d mapping(s): %s", len(correspondences), "; ".join(problems))
        raise MappingConflictError(problems)


def merge_datasets(dataset_a: TabularDataset, dataset_b: TabularDataset, correspondences: List[Correspondence]) -> MergedDataset:
    """
    Führt A und B zu einer Tabelle zusammen.

    Spalten: nicht zugeordnete Spalten aus A, dann die Zielnamen der
    Zuordnungen, dann nicht zugeordnete Spalten aus B. Zeilen: alle Zeilen
    aus A, danach alle aus B. Felder der jeweils anderen Datei werden mit
    NO_VALUE gefüllt.

    Wirft keine Fehler: fehlende Schlüssel werden zu NO_VALUE. Bei doppelten
    Zielnamen gewinnt pro Zeile der letzte Schreibzugriff, in der
    Spaltenliste bleibt das erste Vorkommen stehen. Vorher
    validate_correspondences aufrufen, um das auszuschließen.
    """
    used_a = {c.column_a for c in correspondences}
    used_b = {c.column_b for c in correspondences}

    unmapped_a = [c for c in dataset_a.columns if c not in used_a]
    unmapped_b = [c for c in dataset_b.columns if c not in used_b]

    # dict.fromkeys: Duplikate raus, Reihenfolge des ersten Vorkommens bleibt
    columns = list(dict.fromkeys(unmapped_a + [c.merged_name for c in correspondences] + unmapped_b))

    merged_rows = []

    for row in dataset_a.rows:
        merged_row = {}
        for col in unmapped_a:
            merged_row[col] = row.get(col, NO_VALUE)
        for corr in correspondences:
            merged_row[corr.merged_name] = row.get(corr.column_a, NO_VALUE)
        for col in unmapped_b:
            merged_row[col] = NO_VALUE
        merged_rows.append(merged_row)

    for row in dataset_b.rows:
        merged_row = {}
        for col in unmapped_a:
            merged_row[col] = NO_VALUE
        for corr in correspondences:
            merged_row[corr.merged_name] = row.get(corr.column_b, NO_VALUE)
        for col in unmapped_b:
            merged_row[col] = row.get(col, NO_VALUE)
        merged_rows.append(merged_row)

    logger.debug(
        "Merged %s (%d rows) and %s (%d rows) into %d columns",
        dataset_a.name, dataset_a.row_count, dataset_b.name, dataset_b.row_count, len(columns),
    )

    return MergedDataset(
        columns=columns,
        rows=merged_rows,
        correspondences=list(correspondences),
        source_names=[dataset_a.name, dataset_b.name],
    )


def add_identical_column_mappings(dataset_a: TabularDataset, dataset_b: TabularDataset, correspondences: List[Correspondence]) -> List[Correspondence]:
    """
    Ergänzt Zuordnungen für Spalten, die in beiden Dateien gleich heißen und
    noch nicht zugeordnet sind. Namen, die schon als Zielname vergeben sind,
    werden ausgelassen (validate_correspondences meldet den Konflikt).
    """
    used_a = {c.column_a for c in correspondences}
    used_b = {c.column_b for c in correspondences}
    merged_names = {c.merged_name for c in correspondences}

    added = [
        Correspondence(column_a=col, column_b=col, merged_name=col, confidence=1.0, rationale="Identical column name")
        for col in dataset_a.columns
        if col in dataset_b.columns and col not in used_a and col not in used_b and col not in merged_names
    ]
    if added:
        logger.info("Mapped %d identically named column(s): %s", len(added), ", ".join(c.column_a for c in added))
    return list(correspondences) + added
