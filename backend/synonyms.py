# Typische Spaltennamen-Varianten
# Wird in backend/analyzer.py verwendet, um den LLM-Prompt zu generieren.

# Gleiche Bedeutung, andere Schreibweise
FORMAT_VARIANTS = [
    ("email", "e-mail"),
    ("firstName", "first_name"),
    ("last name", "LastName"),
    ("zip_code", "ZIP"),
    ("created_at", "Created At"),
]

# Synonyme (auch sprachübergreifend)
COLUMN_SYNONYMS = [
    ("phone", "telephone", "Telefon", "mobile"),
    ("id", "identifier", "key", "Nr"),
    ("company", "organization", "Firma"),
    ("street", "address", "Adresse", "Straße"),
    ("city", "town", "Ort", "Stadt"),
    ("country", "nation", "Land"),
    ("price", "cost", "amount", "Preis", "Betrag"),
    ("date", "datum", "day"),
]


def format_synonym_hints():
    """Formatiert die Listen als Aufzählung für den Prompt."""
    lines = [f'- "{a}" vs "{b}"' for a, b in FORMAT_VARIANTS]
    lines += ["- " + " / ".join(f'"{s}"' for s in group) for group in COLUMN_SYNONYMS]
    return "\n".join(lines)
