"""
Core branchtree components.

This package provides the tree node classes and type aliases shared by the
parser, emitter, extractor and checker.
"""

from branchtree.core.tree_node import ActualNode, NodeKind, SpecNode, Specification
from branchtree.core.types import TitlePath

__all__ = [
    "ActualNode",
    "NodeKind",
    "SpecNode",
    "Specification",
    "TitlePath",
]
