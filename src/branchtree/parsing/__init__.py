"""
branchtree parsing components.

This package provides the line lexer and the stack-based parser for the
branching tree notation.
"""

from branchtree.parsing.lexer import ConnectorKind, LineKind, TreeLine, classify_line, lex_branch
from branchtree.parsing.parser import TreeParser, classify_text, normalize_title, parse_tree

__all__ = [
    "ConnectorKind",
    "LineKind",
    "TreeLine",
    "TreeParser",
    "classify_line",
    "classify_text",
    "lex_branch",
    "normalize_title",
    "parse_tree",
]
