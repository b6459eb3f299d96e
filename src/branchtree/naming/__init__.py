"""
branchtree identifier naming.

This package maps specification nodes to guard and test-function identifiers.
"""

from branchtree.naming.policy import DEFAULT_POLICY, NamingPolicy, PolicyLike
from branchtree.naming.resolver import (
    IdentifierScope,
    ResolvedNode,
    contract_identifier,
    resolve_identifier,
    resolve_specification,
    sanitize,
    title_segment,
)

__all__ = [
    "DEFAULT_POLICY",
    "IdentifierScope",
    "NamingPolicy",
    "PolicyLike",
    "ResolvedNode",
    "contract_identifier",
    "resolve_identifier",
    "resolve_specification",
    "sanitize",
    "title_segment",
]
