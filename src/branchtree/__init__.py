"""
branchtree - Solidity test scaffolding and checking for branching tree specs

branchtree parses branching tree specifications, generates Solidity test
skeletons from them, and checks hand-extended test files against them.
"""

from importlib.metadata import version

from branchtree.check import CheckReport, ConsistencyChecker, apply_fixes
from branchtree.config import BranchtreeConfig, load_config
from branchtree.core import ActualNode, NodeKind, SpecNode, Specification
from branchtree.parsing import TreeParser, parse_tree
from branchtree.scaffold import ScaffoldEmitter

__version__ = version("branchtree")

__all__ = [
    "__version__",
    "ActualNode",
    "BranchtreeConfig",
    "CheckReport",
    "ConsistencyChecker",
    "NodeKind",
    "ScaffoldEmitter",
    "SpecNode",
    "Specification",
    "TreeParser",
    "apply_fixes",
    "load_config",
    "parse_tree",
]
