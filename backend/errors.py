# Fehlerklassen
# Eingabefehler -> 4xx, Fehler in Abhängigkeiten (Parser, LLM) -> 5xx.


class InputValidationError(ValueError):
    """Ungültige oder unvollständige Eingabe. Wird nie automatisch wiederholt."""


class MappingConflictError(InputValidationError):
    """Die Zuordnungen widersprechen sich (doppelte Spalten oder Namen)."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class UpstreamError(RuntimeError):
    """Fehler einer externen Komponente. Details werden nur geloggt."""


class FileParseError(UpstreamError):
    pass


class OracleError(UpstreamError):
    pass
