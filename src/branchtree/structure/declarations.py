"""
Declaration contract between the target-language parser and the extractor.

The core never reads Solidity text itself. A SourceParser turns source text into
a ParsedSource: per contract, its guard (modifier) and function declarations in
source order, with each function's applied guards and character spans.
"""

from enum import Enum
from typing import Protocol

from attrs import field, frozen


class DeclarationKind(Enum):
    """Kind of a contract-level declaration."""

    GUARD = "modifier"
    FUNCTION = "function"


@frozen
class SourceDeclaration:
    """
    One guard or function declaration.

    Params:
        name: Declared identifier
        kind: Guard or function
        guards: Guards applied by a function, in application order (empty for guards)
        start: Character offset of the declaration's first character
        end: Character offset just past the declaration's closing brace
    """

    name: str
    kind: DeclarationKind
    guards: tuple[str, ...] = field(default=(), converter=tuple)
    start: int = 0
    end: int = 0


@frozen
class ParsedContract:
    """
    One contract of a source file.

    Params:
        name: Contract name
        body_start: Offset just past the contract's opening brace
        body_end: Offset of the contract's closing brace
        declarations: Guard and function declarations in source order
    """

    name: str
    body_start: int
    body_end: int
    declarations: tuple[SourceDeclaration, ...] = field(default=(), converter=tuple)

    @property
    def guard_names(self) -> frozenset[str]:
        return frozenset(d.name for d in self.declarations if d.kind is DeclarationKind.GUARD)

    @property
    def identifiers(self) -> frozenset[str]:
        return frozenset(d.name for d in self.declarations)

    def find(self, name: str) -> SourceDeclaration | None:
        """Return the first declaration with the given name."""
        for declaration in self.declarations:
            if declaration.name == name:
                return declaration
        return None


@frozen
class ParsedSource:
    """All contracts declared in one source file, in source order."""

    contracts: tuple[ParsedContract, ...] = field(default=(), converter=tuple)

    def select(self, name: str) -> ParsedContract | None:
        """
        Pick the contract to compare against a specification.

        Params:
            name: Expected contract name

        Returns:
            The contract with that name, else the first contract, else None
        """
        for contract in self.contracts:
            if contract.name == name:
                return contract
        return self.contracts[0] if self.contracts else None


class SourceParser(Protocol):
    """Target-language parser collaborator."""

    def parse(self, text: str) -> ParsedSource:
        """
        Parse source text into its declaration structure.

        Raises:
            ExternalParseError: When the source cannot be parsed
        """
        ...
