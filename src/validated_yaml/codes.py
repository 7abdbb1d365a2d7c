"""Failure code constants for validated_yaml.

These constants prevent stringly-typed failure codes and give callers a
stable value to branch on instead of matching diagnostic text.
"""

from enum import Enum


class FailureCode(str, Enum):
    """Failure codes attached to every error raised by the pipeline."""

    # Fatal (abort the whole batch before any file is processed)
    NO_MATCH = "NO_MATCH"
    INVALID_PATTERN = "INVALID_PATTERN"

    # Per-file (recorded as diagnostics, batch keeps going)
    READ_ERROR = "READ_ERROR"
    MISSING_REFERENCE = "MISSING_REFERENCE"
    SCHEMA_COMPILE_ERROR = "SCHEMA_COMPILE_ERROR"
    DECODE_ERROR = "DECODE_ERROR"
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
