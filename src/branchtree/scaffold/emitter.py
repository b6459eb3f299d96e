"""
Solidity scaffold emitter.

Walks a resolved specification depth-first, left-to-right and emits one modifier
per condition and one test function per action. Declaration order always
follows the tree order, so regenerating an unchanged tree is byte-identical.
"""

import logging

from attrs import field, frozen

from branchtree.config import BranchtreeConfig
from branchtree.core.tree_node import NodeKind, Specification
from branchtree.core.types import TitlePath
from branchtree.naming.resolver import ResolvedNode, resolve_specification
from branchtree.structure.declarations import (
    DeclarationKind,
    ParsedContract,
    ParsedSource,
    SourceDeclaration,
)

logger = logging.getLogger(__name__)

LICENSE_HEADER = "// SPDX-License-Identifier: UNLICENSED"
SKIP_STATEMENT = "vm.skip(true);"


@frozen
class EmittedDeclaration:
    """
    Generated text of one declaration.

    Params:
        path: Titles from below the root down to the originating node
        identifier: Declared name
        kind: Guard or function
        guards: Guards the function applies, outermost first
        text: Declaration text, indented, without trailing newline
    """

    path: TitlePath
    identifier: str
    kind: DeclarationKind
    guards: tuple[str, ...] = field(default=(), converter=tuple)
    text: str = ""

    @property
    def indent_width(self) -> int:
        return len(self.text) - len(self.text.lstrip(" "))


@frozen
class Scaffold:
    """A generated file together with its declaration structure."""

    text: str
    source: ParsedSource


def _covered(path: TitlePath, missing: frozenset[TitlePath]) -> bool:
    return any(path[:length] in missing for length in range(1, len(path) + 1))


class ScaffoldEmitter:
    """Emits Solidity test skeletons from specifications."""

    def __init__(self, config: BranchtreeConfig | None = None):
        self.config = config or BranchtreeConfig()

    def indent(self, level: int = 1) -> str:
        """Return the indentation string for a nesting level."""
        return " " * (self.config.indent * level)

    def resolve(self, spec: Specification) -> ResolvedNode:
        """Resolve identifiers with the configured naming policy."""
        return resolve_specification(spec, self.config.naming)

    def emit_guard(self, identifier: str) -> str:
        """
        Emit a modifier with a placeholder body.

        A modifier follows the structure:
            modifier whenSomething() {
              _;
            }
        """
        return (
            f"{self.indent()}modifier {identifier}() {{\n"
            f"{self.indent(2)}_;\n"
            f"{self.indent()}}}"
        )

    def emit_function(self, identifier: str, guards: tuple[str, ...], title: str) -> str:
        """
        Emit a test function applying the full guard chain.

        Functions with guards list `external` and each guard on its own line;
        the body holds the action text as a comment.
        """
        body = f"{self.indent(2)}// {title}\n"
        if self.config.emit_vm_skip:
            body += f"{self.indent(2)}{SKIP_STATEMENT}\n"

        if not guards:
            return f"{self.indent()}function {identifier}() external {{\n{body}{self.indent()}}}"

        header = f"{self.indent()}function {identifier}()\n{self.indent(2)}external\n"
        header += "".join(f"{self.indent(2)}{guard}\n" for guard in guards)
        return f"{header}{self.indent()}{{\n{body}{self.indent()}}}"

    def declarations(self, resolved: ResolvedNode) -> list[EmittedDeclaration]:
        """
        Emit every declaration of a resolved tree in traversal order.

        Params:
            resolved: The resolved root

        Returns:
            One guard per condition and one function per action
        """
        emitted = []
        for node in resolved.walk():
            match node.node.kind:
                case NodeKind.CONDITION:
                    emitted.append(
                        EmittedDeclaration(
                            path=node.path,
                            identifier=node.identifier,
                            kind=DeclarationKind.GUARD,
                            text=self.emit_guard(node.identifier),
                        )
                    )
                case NodeKind.ACTION:
                    emitted.append(
                        EmittedDeclaration(
                            path=node.path,
                            identifier=node.identifier,
                            kind=DeclarationKind.FUNCTION,
                            guards=node.guards,
                            text=self.emit_function(node.identifier, node.guards, node.node.title),
                        )
                    )
        return emitted

    def render(self, spec: Specification) -> Scaffold:
        """
        Emit a complete source file and describe its declarations.

        Params:
            spec: The parsed specification

        Returns:
            The generated text and its ParsedSource equivalent

        Raises:
            IdentifierError: When a title cannot be turned into an identifier
        """
        resolved = self.resolve(spec)
        declarations = self.declarations(resolved)

        text = f"{LICENSE_HEADER}\npragma solidity {self.config.solidity_version};\n\n"
        text += f"contract {resolved.identifier} {{\n"
        body_start = len(text) - 1

        spans = []
        for index, declaration in enumerate(declarations):
            if index:
                text += "\n\n"
            start = len(text) + declaration.indent_width
            text += declaration.text
            spans.append(
                SourceDeclaration(
                    name=declaration.identifier,
                    kind=declaration.kind,
                    guards=declaration.guards,
                    start=start,
                    end=len(text),
                )
            )
        if declarations:
            text += "\n"

        body_end = len(text)
        text += "}\n"

        logger.debug("emitted %d declarations for contract %s", len(declarations), resolved.identifier)
        contract = ParsedContract(
            name=resolved.identifier,
            body_start=body_start,
            body_end=body_end,
            declarations=spans,
        )
        return Scaffold(text=text, source=ParsedSource(contracts=(contract,)))

    def emit(self, spec: Specification) -> str:
        """Emit a complete source file for a specification."""
        return self.render(spec).text

    def emit_patch(
        self,
        spec: Specification,
        missing_paths: frozenset[TitlePath],
        existing: frozenset[str] = frozenset(),
    ) -> list[EmittedDeclaration]:
        """
        Emit only the declarations needed to fill missing paths.

        A declaration is emitted when its path equals or extends a missing path
        and its identifier is not already declared in the target file.

        Params:
            spec: The parsed specification
            missing_paths: Paths reported as missing by the checker
            existing: Identifiers already declared in the target contract

        Returns:
            The selected declarations in traversal order
        """
        declarations = self.declarations(self.resolve(spec))
        return [
            declaration
            for declaration in declarations
            if _covered(declaration.path, missing_paths) and declaration.identifier not in existing
        ]
