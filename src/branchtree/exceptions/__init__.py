"""
branchtree exception classes.

This package provides all exception types used throughout branchtree for
consistent error handling and reporting.
"""

from branchtree.exceptions.core import (
    BranchtreeError,
    ConfigurationError,
    DuplicateSiblingError,
    ErrorContext,
    ExternalParseError,
    IdentifierCollisionError,
    IdentifierError,
    TreeSyntaxError,
)

__all__ = [
    "BranchtreeError",
    "ConfigurationError",
    "DuplicateSiblingError",
    "ErrorContext",
    "ExternalParseError",
    "IdentifierCollisionError",
    "IdentifierError",
    "TreeSyntaxError",
]
