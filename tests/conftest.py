"""
Shared test fixtures and utilities for the branchtree test suite.
"""

import re

import pytest

from branchtree.structure.declarations import (
    DeclarationKind,
    ParsedContract,
    ParsedSource,
    SourceDeclaration,
)

_CONTRACT = re.compile(r"\bcontract\s+(?P<name>\w+)[^{]*\{")
_MEMBER = re.compile(r"\b(?P<kind>modifier|function)\s+(?P<name>\w+)\s*\([^)]*\)(?P<header>[^{;]*)\{")
_NON_GUARD_WORDS = {
    "external",
    "public",
    "internal",
    "private",
    "view",
    "pure",
    "payable",
    "virtual",
    "override",
}


def _closing_brace(text: str, open_index: int) -> int:
    depth = 0
    for index in range(open_index, len(text)):
        if text[index] == "{":
            depth += 1
        elif text[index] == "}":
            depth -= 1
            if depth == 0:
                return index
    raise ValueError("unbalanced braces")


class ScanningParser:
    """
    Test double for the solc-backed parser.

    Understands the layout the scaffold emitter produces and the hand-written
    variations used in tests: contracts, modifiers, and functions with a
    modifier list between the parameter list and the body.
    """

    def parse(self, text: str) -> ParsedSource:
        contracts = []
        for contract in _CONTRACT.finditer(text):
            open_index = contract.end() - 1
            close_index = _closing_brace(text, open_index)
            body = text[: close_index]
            declarations = []
            position = open_index + 1
            while True:
                member = _MEMBER.search(body, position)
                if member is None:
                    break
                end = _closing_brace(text, member.end() - 1) + 1
                guards = [
                    word
                    for word in member.group("header").split()
                    if word not in _NON_GUARD_WORDS
                ]
                declarations.append(
                    SourceDeclaration(
                        name=member.group("name"),
                        kind=DeclarationKind(member.group("kind")),
                        guards=guards if member.group("kind") == "function" else (),
                        start=member.start(),
                        end=end,
                    )
                )
                position = end
            contracts.append(
                ParsedContract(
                    name=contract.group("name"),
                    body_start=open_index + 1,
                    body_end=close_index,
                    declarations=declarations,
                )
            )
        return ParsedSource(contracts=contracts)


@pytest.fixture
def scanning_parser():
    """Parser double that reads declarations without invoking solc."""
    return ScanningParser()


@pytest.fixture
def deep_tree():
    """A multi-level tree mixing conditions, givens and actions."""
    return """DeepTest
├── when stuff called
│  └── it should revert
└── when not stuff called
   ├── when the deposit amount is zero
   │  └── it should revert
   └── when the deposit amount is not zero
      ├── when the number count is zero
      │  └── it should revert
      └── given the asset is a contract
          ├── it should create the child
          └── it should emit a {MultipleChildren} event
"""


@pytest.fixture
def simple_tree():
    """One condition with one action."""
    return "Foo_Test\n└── when x\n    └── it should work\n"
