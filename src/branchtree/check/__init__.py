"""
branchtree consistency checking.

This package compares specifications with existing test source, reports the
mismatches, and splices in missing declarations on request.
"""

from branchtree.check.checker import ConsistencyChecker, stable_subsequence
from branchtree.check.fixer import FixResult, apply_fixes
from branchtree.check.report import CheckReport, Mismatch, MismatchKind, Severity

__all__ = [
    "CheckReport",
    "ConsistencyChecker",
    "FixResult",
    "Mismatch",
    "MismatchKind",
    "Severity",
    "apply_fixes",
    "stable_subsequence",
]
