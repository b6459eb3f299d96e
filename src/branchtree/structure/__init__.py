"""
branchtree structure extraction.

This package defines the declaration contract filled by the target-language
parser, the solc-backed parser, and the extractor that rebuilds the actual
structure of a test contract.
"""

from branchtree.structure.declarations import (
    DeclarationKind,
    ParsedContract,
    ParsedSource,
    SourceDeclaration,
    SourceParser,
)
from branchtree.structure.extractor import StructureExtractor, extract_structure
from branchtree.structure.solc import SolcParser, source_from_ast

__all__ = [
    "DeclarationKind",
    "ParsedContract",
    "ParsedSource",
    "SolcParser",
    "SourceDeclaration",
    "SourceParser",
    "StructureExtractor",
    "extract_structure",
    "source_from_ast",
]
