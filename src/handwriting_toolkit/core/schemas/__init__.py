"""Validation for request payloads."""

from .validator import ValidationError, validate_settings

__all__ = ["ValidationError", "validate_settings"]
