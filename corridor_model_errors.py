"""
Exception types for the carless corridor model.

Every failure is surfaced to the caller as one of these types. The one
exception is the optional transit correlation, whose InsufficientDataError
or DegenerateInputError is kept on the results instead of ending the run.
"""


class CorridorModelError(Exception):
    """Base class for carless corridor model errors."""


class InvalidInputError(CorridorModelError, ValueError):
    """Malformed or inconsistent input (negative counts, sub-count above total, etc.)."""


class InsufficientDataError(CorridorModelError):
    """
    Fewer observations than a component requires.

    Distinct from empty input: the data exists but is too small for the
    reported statistic to be computed or trusted.
    """

    def __init__(self, message: str, n: int, minimum: int):
        super().__init__(message)
        self.n = n
        self.minimum = minimum


class DegenerateInputError(CorridorModelError):
    """Zero-variance or zero-area geometry that would make a statistic undefined."""
