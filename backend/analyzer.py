# Schritt 1: Spaltenanalyse
# Das LLM schlägt Zuordnungen zwischen den Spalten der beiden Dateien vor.

import json
import logging

from backend.errors import OracleError
from backend.loader import get_sample_rows
from backend.models import Correspondence, MappingProposal
from backend.synonyms import format_synonym_hints

logger = logging.getLogger(__name__)

# Konfiguration
DEFAULT_MODEL = "gpt-4o-mini"
SAMPLE_SIZE = 3
MIN_CONFIDENCE = 0.6


def build_analysis_prompt(name_a, columns_a, sample_a, name_b, columns_b, sample_b):
    return f"""
    You are an expert data analyst tasked with analyzing two datasets and finding intelligent column mappings for merging them.

    File 1 ({name_a}):
    Headers: {", ".join(columns_a)}
    Sample data (first {SAMPLE_SIZE} rows):
    {json.dumps(sample_a or [], indent=2, ensure_ascii=False, default=str)}

    File 2 ({name_b}):
    Headers: {", ".join(columns_b)}
    Sample data (first {SAMPLE_SIZE} rows):
    {json.dumps(sample_b or [], indent=2, ensure_ascii=False, default=str)}

    Your task is to identify columns that should be merged together. Look for:
    1. Exact matches (case-insensitive)
    2. Similar names with different formats (e.g., "email" vs "e-mail", "firstName" vs "first_name")
    3. Synonymous column names (e.g., "phone" vs "telephone", "id" vs "identifier")
    4. Columns that represent the same type of data based on sample values

    Typical variants and synonyms:
    {format_synonym_hints()}

    Rules:
    - Every column may appear in at most one mapping.
    - mergedName must be unique across all mappings (use the cleaner/more standard format).
    - Only suggest mappings where you're reasonably confident (>{MIN_CONFIDENCE}) that the columns contain the same type of information.
    - List the columns without a match in unmatchedColumns1 / unmatchedColumns2.

    Output JSON format (exactly this schema):
    {{
      "mappings": [
        {{ "column1": "...", "column2": "...", "confidence": 0.0, "reason": "...", "mergedName": "..." }}
      ],
      "unmatchedColumns1": ["..."],
      "unmatchedColumns2": ["..."]
    }}
    """


def _clamp(value):
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return min(max(value, 0.0), 1.0)


def parse_mapping_response(payload, columns_a, columns_b) -> MappingProposal:
    """
    Übernimmt nur strukturell gültige Vorschläge aus der LLM-Antwort.

    Verworfen werden Einträge ohne beide Spalten, mit unbekannten Spalten oder
    mit bereits verwendeten Spalten. Die Listen der nicht zugeordneten Spalten
    werden aus dem Ergebnis neu berechnet.
    """
    raw_mappings = payload.get("mappings") if isinstance(payload, dict) else None
    if not isinstance(raw_mappings, list):
        raw_mappings = []

    known_a = set(columns_a)
    known_b = set(columns_b)
    used_a, used_b = set(), set()
    correspondences = []

    for item in raw_mappings:
        if not isinstance(item, dict):
            continue
        col_a = item.get("column1")
        col_b = item.get("column2")
        if not isinstance(col_a, str) or not isinstance(col_b, str):
            logger.warning("Dropping mapping with non-text columns: %r -> %r", col_a, col_b)
            continue
        if col_a not in known_a or col_b not in known_b:
            logger.warning("Dropping mapping with unknown columns: %r -> %r", col_a, col_b)
            continue
        if col_a in used_a or col_b in used_b:
            logger.warning("Dropping mapping that reuses a column: %r -> %r", col_a, col_b)
            continue
        used_a.add(col_a)
        used_b.add(col_b)

        merged_name = item.get("mergedName")
        if not isinstance(merged_name, str) or not merged_name.strip():
            merged_name = col_a

        correspondences.append(Correspondence(
            column_a=col_a,
            column_b=col_b,
            merged_name=merged_name.strip(),
            confidence=_clamp(item.get("confidence")),
            rationale=str(item.get("reason") or ""),
        ))

    return MappingProposal(
        correspondences=correspondences,
        unmatched_a=[c for c in columns_a if c not in used_a],
        unmatched_b=[c for c in columns_b if c not in used_b],
    )


def analyze_columns_step1(client, columns_a, columns_b, sample_a=None, sample_b=None,
                          name_a="File 1", name_b="File 2", model_name: str = DEFAULT_MODEL) -> MappingProposal:
    system_prompt = "You are a data integration expert. Respond only with valid JSON."
    user_prompt = build_analysis_prompt(name_a, columns_a, sample_a, name_b, columns_b, sample_b)

    try:
        response = client.chat.completions.create(
            model=model_name,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            response_format={"type": "json_object"}
        )
        payload = json.loads(response.choices[0].message.content)
    except json.JSONDecodeError as e:
        raise OracleError(f"Model returned invalid JSON: {e}") from e
    except Exception as e:
        raise OracleError(f"Column analysis failed: {e}") from e

    proposal = parse_mapping_response(payload, columns_a, columns_b)
    logger.info(
        "Model %s proposed %d mapping(s) for %s / %s",
        model_name, len(proposal.correspondences), name_a, name_b,
    )
    return proposal


class OpenAIMappingOracle:
    """Schmale Schnittstelle für die Spaltenanalyse. In Tests durch einen Stub ersetzbar."""

    def __init__(self, client, model_name: str = DEFAULT_MODEL):
        self.client = client
        self.model_name = model_name

    def propose_mappings(self, columns_a, columns_b, sample_a=None, sample_b=None,
                         name_a="File 1", name_b="File 2") -> MappingProposal:
        return analyze_columns_step1(
            self.client,
            columns_a,
            columns_b,
            get_sample_rows(sample_a or [], SAMPLE_SIZE),
            get_sample_rows(sample_b or [], SAMPLE_SIZE),
            name_a=name_a,
            name_b=name_b,
            model_name=self.model_name,
        )
