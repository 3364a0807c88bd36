"""
Exception types raised while building and running corpus generators.
"""


class CorpusGenError(Exception):
    """Base class for corpus generator errors."""


class ConfigError(CorpusGenError):
    """Raised when settings, a fields file or a config file is invalid."""


class FieldBindingError(CorpusGenError):
    """Raised when a field definition cannot be bound to a value function."""

    def __init__(self, field_name: str, reason: str):
        super().__init__(f"cannot bind field '{field_name}': {reason}")
        self.field_name = field_name
        self.reason = reason


class FieldNotInFieldsError(CorpusGenError):
    """Raised when a template references a field missing from the fields definition."""

    def __init__(self, field_name: str):
        super().__init__(
            f"generate called on a field not present in fields yaml definition: '{field_name}'"
        )
        self.field_name = field_name


class DuplicateValueError(CorpusGenError):
    """Raised when a unique field runs out of fresh values."""

    def __init__(self, field_name: str, attempts: int):
        super().__init__(
            f"field '{field_name}' produced only duplicate values after {attempts} attempts"
        )
        self.field_name = field_name
        self.attempts = attempts


class EndOfStream(EOFError):
    """Raised by emit() once a bounded generator has produced all of its events."""
