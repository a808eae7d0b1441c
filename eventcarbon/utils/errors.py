"""Validation errors raised by the emission calculators."""

from __future__ import annotations

from typing import Any, Optional


class EmissionValidationError(ValueError):
    """Raised when calculator input fails validation.

    Attributes:
        index: Position of the offending entry, or None for call-level errors
        field: Name of the offending field, if any
        value: The value that was received
    """

    kind = 'validation'

    def __init__(self, message: str, index: Optional[int] = None,
                 field: Optional[str] = None, value: Any = None):
        if index is not None:
            message = f'Entry {index}: {message}'
        super().__init__(message)
        self.index = index
        self.field = field
        self.value = value

    def to_dict(self):
        value = self.value
        if not isinstance(value, (str, int, float, bool, type(None))):
            value = repr(value)
        return {
            'error': str(self),
            'kind': self.kind,
            'index': self.index,
            'field': self.field,
            'value': value,
        }


class ShapeError(EmissionValidationError):
    """Input is not a non-empty sequence (or mapping) where one is required."""

    kind = 'shape'


class EnumerationError(EmissionValidationError):
    """A category, type, mode, source or method outside its closed set."""

    kind = 'enumeration'


class RangeError(EmissionValidationError):
    """A numeric field is negative, zero where it must be positive, or not finite."""

    kind = 'range'


class UnderSpecifiedError(EmissionValidationError):
    """An entry provides none of the accepted ways to resolve its quantity."""

    kind = 'under_specified'


class DistributionError(EmissionValidationError):
    """Distance-band probabilities do not sum to 1.0."""

    kind = 'distribution'
