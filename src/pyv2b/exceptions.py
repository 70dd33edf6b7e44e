"""
Custom exceptions for PyV2B.
Provides domain-specific error handling with informative messages.
"""
import math
import numbers
from typing import Any, Optional, Tuple


class V2BError(Exception):
    """Base exception for all PyV2B errors."""
    pass


class ConfigurationError(V2BError):
    """Raised when there are configuration-related issues."""
    pass


class InputError(V2BError):
    """Raised when caller-supplied inputs are unusable."""
    pass


class InputTypeError(InputError):
    """Raised when an argument has the wrong type."""
    def __init__(self, param_name: str, value: Any, expected: str):
        self.param_name = param_name
        self.value = value
        self.expected = expected
        super().__init__(f"'{param_name}' must be type {expected}, "
                         f"got {type(value).__name__}")


class InvalidInputError(InputError):
    """Raised when an argument has the right type but an unusable value."""
    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        message = f"Invalid value for '{param_name}': {value}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class TaxonFormatError(InputError):
    """Raised when a taxon key cannot be split into genus and species."""
    def __init__(self, taxon_key: str):
        self.taxon_key = taxon_key
        super().__init__(f"Wrong species format: '{taxon_key}'. "
                         f"Expected 'GENUS.SPECIES' or 'GENUS.SPECIES.VARIETY'")


class ParameterSelectionError(V2BError):
    """Raised when a required parameter table does not yield exactly one row."""
    def __init__(self, table: str, key: Tuple, match_count: int):
        self.table = table
        self.key = key
        self.match_count = match_count
        if match_count == 0:
            detail = "no matching row"
        else:
            detail = f"{match_count} matching rows, expected exactly one"
        super().__init__(f"Error in parameter selection for table '{table}': "
                         f"{detail} for key {key}")


class DataError(V2BError):
    """Raised when there are data-related issues."""
    pass


class DatasetNotFoundError(DataError):
    """Raised when a parameter table file is not found."""
    def __init__(self, file_path: str, file_type: str = "file"):
        self.file_path = file_path
        self.file_type = file_type
        super().__init__(f"Required {file_type} not found: {file_path}")


class InvalidDataError(DataError):
    """Raised when data is malformed or invalid."""
    def __init__(self, data_description: str, reason: str):
        self.data_description = data_description
        self.reason = reason
        super().__init__(f"Invalid {data_description}: {reason}")


# Validation utilities
def validate_finite_non_negative(value: float, param_name: str) -> float:
    """Validate that a value is a finite number not below zero.

    Args:
        value: Value to validate
        param_name: Parameter name for error message

    Returns:
        The validated value

    Raises:
        InputTypeError: If value is not a real number
        InvalidInputError: If value is negative, NaN or infinite
    """
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        raise InputTypeError(param_name, value, "numeric")
    if not math.isfinite(value):
        raise InvalidInputError(param_name, value, "must be finite")
    if value < 0:
        raise InvalidInputError(param_name, value, "must not be negative")
    return value


def describe_key(jurisdiction: str, genus: str, species: Optional[str],
                 variety: Optional[str], ecozone: Any) -> str:
    """Format a lookup key the way error messages and logs print it."""
    taxon = ".".join(p for p in (genus, species, variety) if p)
    return f"{taxon} / {jurisdiction} / ecozone {ecozone}"
