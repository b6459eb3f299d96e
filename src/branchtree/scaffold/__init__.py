"""
branchtree scaffold generation.

This package emits Solidity test skeletons from parsed specifications.
"""

from branchtree.scaffold.emitter import EmittedDeclaration, Scaffold, ScaffoldEmitter

__all__ = [
    "EmittedDeclaration",
    "Scaffold",
    "ScaffoldEmitter",
]
