"""
Solidity parser collaborator backed by the `solc` compiler.

The compiler runs in standard-JSON mode and stops after parsing, so imports do
not need to resolve. Only the compact JSON AST is read: contracts, modifier
definitions, function definitions and the modifiers each function invokes.
"""

import json
import logging
import subprocess
from typing import Any

from branchtree.exceptions import ExternalParseError
from branchtree.structure.declarations import (
    DeclarationKind,
    ParsedContract,
    ParsedSource,
    SourceDeclaration,
)

logger = logging.getLogger(__name__)

DEFAULT_SOLC = "solc"
SOURCE_KEY = "Scaffold.t.sol"


def build_request(text: str) -> dict[str, Any]:
    """Build the standard-JSON input that parses one source and returns its AST."""
    return {
        "language": "Solidity",
        "sources": {SOURCE_KEY: {"content": text}},
        "settings": {
            "stopAfter": "parsing",
            "outputSelection": {"*": {"": ["ast"]}},
        },
    }


class _OffsetMap:
    """Converts the UTF-8 byte offsets used by solc into character offsets."""

    def __init__(self, text: str):
        self._encoded = text.encode("utf-8")
        self._ascii = len(self._encoded) == len(text)

    def char(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return len(self._encoded[:byte_offset].decode("utf-8", errors="ignore"))


def _span(node: dict[str, Any], offsets: _OffsetMap) -> tuple[int, int]:
    start, length, _ = (int(part) for part in node["src"].split(":"))
    return offsets.char(start), offsets.char(start + length)


def _modifier_names(function: dict[str, Any]) -> tuple[str, ...]:
    names = []
    for invocation in function.get("modifiers") or []:
        modifier_name = invocation.get("modifierName") or {}
        name = modifier_name.get("name")
        if name:
            names.append(name)
    return tuple(names)


def source_from_ast(ast: dict[str, Any], text: str) -> ParsedSource:
    """
    Convert a compact JSON AST into the declaration contract.

    Params:
        ast: The `SourceUnit` node returned by solc
        text: The source text the AST was produced from

    Returns:
        The contracts with their guard and function declarations
    """
    offsets = _OffsetMap(text)
    contracts = []

    for unit in ast.get("nodes", []):
        if unit.get("nodeType") != "ContractDefinition":
            continue

        start, end = _span(unit, offsets)
        body_start = text.index("{", start) + 1
        declarations = []
        for member in unit.get("nodes", []):
            match member.get("nodeType"):
                case "ModifierDefinition":
                    member_start, member_end = _span(member, offsets)
                    declarations.append(
                        SourceDeclaration(
                            name=member["name"],
                            kind=DeclarationKind.GUARD,
                            start=member_start,
                            end=member_end,
                        )
                    )
                case "FunctionDefinition" if member.get("kind", "function") == "function":
                    member_start, member_end = _span(member, offsets)
                    declarations.append(
                        SourceDeclaration(
                            name=member["name"],
                            kind=DeclarationKind.FUNCTION,
                            guards=_modifier_names(member),
                            start=member_start,
                            end=member_end,
                        )
                    )

        contracts.append(
            ParsedContract(
                name=unit["name"],
                body_start=body_start,
                body_end=end - 1,
                declarations=declarations,
            )
        )

    return ParsedSource(contracts=contracts)


class SolcParser:
    """
    SourceParser implementation that shells out to solc.

    Params:
        executable: Name or path of the solc binary
        file: Path shown in error messages
    """

    def __init__(self, executable: str = DEFAULT_SOLC, file: str | None = None):
        self.executable = executable
        self.file = file

    def for_file(self, file: str) -> "SolcParser":
        """Return a parser that reports errors against the given path."""
        return SolcParser(self.executable, file)

    def parse(self, text: str) -> ParsedSource:
        """
        Parse Solidity source text.

        Raises:
            ExternalParseError: When solc is missing, fails, or reports errors
        """
        try:
            completed = subprocess.run(
                [self.executable, "--standard-json"],
                input=json.dumps(build_request(text)),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise ExternalParseError(f"'{self.executable}' was not found", file=self.file) from e

        if completed.returncode != 0:
            raise ExternalParseError(
                f"'{self.executable}' exited with status {completed.returncode}",
                file=self.file,
                diagnostics=[completed.stderr.strip()] if completed.stderr.strip() else None,
            )

        try:
            output = json.loads(completed.stdout)
        except json.JSONDecodeError as e:
            raise ExternalParseError("compiler output is not valid JSON", file=self.file) from e

        errors = [entry for entry in output.get("errors", []) if entry.get("severity") == "error"]
        if errors:
            raise ExternalParseError(
                "source has errors",
                file=self.file,
                diagnostics=[entry.get("formattedMessage") or entry.get("message", "") for entry in errors],
            )

        ast = output.get("sources", {}).get(SOURCE_KEY, {}).get("ast")
        if ast is None:
            raise ExternalParseError("compiler returned no AST", file=self.file)

        logger.debug("parsed %s with %s", self.file or "source", self.executable)
        return source_from_ast(ast, text)
