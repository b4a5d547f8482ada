# Request-Verarbeitung
# Die beiden Operationen Analyse und Merge auf einfachen dict-Payloads
# (gleiches Format wie die HTTP-Routen). Zustandslos: alles kommt aus dem Payload.

import logging

from backend.errors import InputValidationError, OracleError, UpstreamError
from backend.merger import merge_datasets, validate_correspondences
from backend.models import Correspondence, TabularDataset

logger = logging.getLogger(__name__)


def analyze_columns_request(payload, oracle):
    """
    payload: {"file1": {"name", "headers", "sampleData"}, "file2": {...}}
    Gibt das Ergebnis im Format {"mappings", "unmatchedColumns1", "unmatchedColumns2"} zurück.
    """
    payload = payload or {}
    file1 = payload.get("file1")
    file2 = payload.get("file2")

    if not file1 or not file2:
        raise InputValidationError("Both files are required")
    for label, f in (("file1", file1), ("file2", file2)):
        if not isinstance(f, dict) or not isinstance(f.get("headers"), list):
            raise InputValidationError(f"Column headers are required for {label}")

    if oracle is None:
        raise OracleError("No mapping service configured (OPENAI_API_KEY is not set)")

    try:
        proposal = oracle.propose_mappings(
            [str(h) for h in file1["headers"]],
            [str(h) for h in file2["headers"]],
            file1.get("sampleData") or [],
            file2.get("sampleData") or [],
            name_a=file1.get("name") or "File 1",
            name_b=file2.get("name") or "File 2",
        )
    except UpstreamError:
        raise
    except Exception as e:
        raise OracleError(f"Column analysis failed: {e}") from e

    return proposal.to_dict()


def parse_merge_payload(payload):
    """Prüft den Merge-Payload und gibt (dataset_a, dataset_b, correspondences) zurück."""
    payload = payload or {}
    file1 = payload.get("file1")
    file2 = payload.get("file2")
    mappings = payload.get("mappings")

    if not file1 or not file2:
        raise InputValidationError("Both files are required")
    if not isinstance(mappings, list):
        raise InputValidationError("Mappings must be an array")

    dataset_a = TabularDataset.from_dict(file1)
    dataset_b = TabularDataset.from_dict(file2)
    correspondences = [Correspondence.from_dict(m) for m in mappings]
    return dataset_a, dataset_b, correspondences


def merge_files_request(payload):
    """
    payload: {"file1": {"name", "headers", "data", "rowCount"}, "file2": {...}, "mappings": [...]}
    Gibt {"headers", "data", "mappings", "rowCount", "sourceFiles"} zurück.
    """
    dataset_a, dataset_b, correspondences = parse_merge_payload(payload)
    validate_correspondences(dataset_a, dataset_b, correspondences)

    merged = merge_datasets(dataset_a, dataset_b, correspondences)
    logger.info(
        "Merged %s and %s: %d rows, %d columns",
        dataset_a.name, dataset_b.name, merged.row_count, len(merged.columns),
    )
    return merged.to_dict()
