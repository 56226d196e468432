"""Custom exception hierarchy for the fill engine."""

from .constants import FailureKind


class FillError(Exception):
    """Base exception for engine failures."""

    kind = FailureKind.NO_SOLUTION


class DictionaryLoadError(FillError):
    """Raised when the scored dictionary cannot be read."""


class InvalidInputError(FillError):
    """Raised when a grid or request cannot be interpreted."""

    kind = FailureKind.INVALID_INPUT


class SlotPlacementError(InvalidInputError):
    """Raised when a word cannot be written into a slot."""


class NoSolutionError(FillError):
    """Raised when the constraints admit no complete fill."""


class FillTimeoutError(FillError):
    """Raised when the deadline elapsed before a fill was found."""

    kind = FailureKind.TIMEOUT


class QualityRejectedError(FillError):
    """Raised when a complete fill scores below the quality policy."""


class ValidationError(FillError):
    """Raised when the fill integrity checks fail."""
