"""Validation of candidate text against a style spec."""

from .validator import StyleValidator, TextMetrics, ValidationResult, Violation

__all__ = [
    "StyleValidator",
    "TextMetrics",
    "ValidationResult",
    "Violation",
]
