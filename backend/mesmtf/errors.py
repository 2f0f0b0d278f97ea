"""Error taxonomy for the diagnosis engine."""


class DiagnosisError(Exception):
    """Base class for all engine errors."""


class ValidationError(DiagnosisError):
    """Malformed evaluation input. Raised before any scoring happens."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class ConfigurationError(DiagnosisError):
    """Inconsistent disease rule profile. Fatal at load time."""


class PersistenceError(DiagnosisError):
    """Record store unreachable or write rejected. Never fatal."""
