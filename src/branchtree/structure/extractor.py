"""
Structure extraction from existing test source.

Rebuilds an ActualNode tree from a parsed contract by grouping test functions
under the guard chains they apply: functions sharing a chain prefix share the
containers for that prefix. The result has the same shape the scaffold emitter
would produce for an equivalent specification.
"""

import logging
from dataclasses import dataclass, field

from branchtree.core.tree_node import ActualNode
from branchtree.structure.declarations import DeclarationKind, ParsedContract

logger = logging.getLogger(__name__)

DEFAULT_TEST_PREFIX = "test"


@dataclass
class _Branch:
    """Mutable container used while grouping; frozen into an ActualNode at the end."""

    name: str
    anchor: int
    is_container: bool = True
    classified: bool = True
    children: dict[str, "_Branch"] = field(default_factory=dict)
    leaves: list["_Branch"] = field(default_factory=list)

    def container(self, name: str, anchor: int) -> "_Branch":
        branch = self.children.get(name)
        if branch is None:
            branch = _Branch(name=name, anchor=anchor)
            self.children[name] = branch
        return branch

    def freeze(self) -> ActualNode:
        members = sorted([*self.children.values(), *self.leaves], key=lambda b: b.anchor)
        return ActualNode(
            name=self.name,
            is_container=self.is_container,
            children=tuple(member.freeze() for member in members),
            classified=self.classified,
        )


class StructureExtractor:
    """
    Builds the actual-structure tree of one contract.

    Params:
        test_prefix: Functions whose name starts with this prefix are tests;
            any other function is a helper and is left out of the structure
    """

    def __init__(self, test_prefix: str = DEFAULT_TEST_PREFIX):
        self.test_prefix = test_prefix

    def extract(self, contract: ParsedContract) -> ActualNode:
        """
        Group a contract's test functions by guard chain.

        Containers are ordered by their guard declaration (or, for a chain that
        is reached before its guard is declared, by first use); leaves by their
        function declaration. Test functions applying a guard that the contract
        does not declare are kept as unclassified leaves under the root.

        Params:
            contract: The parsed contract

        Returns:
            The root ActualNode, named after the contract
        """
        root = _Branch(name=contract.name, anchor=-1)
        declared = contract.guard_names
        guard_offsets: dict[str, int] = {}
        for declaration in contract.declarations:
            if declaration.kind is DeclarationKind.GUARD:
                guard_offsets.setdefault(declaration.name, declaration.start)

        applied: set[str] = set()
        for declaration in contract.declarations:
            if declaration.kind is not DeclarationKind.FUNCTION:
                continue
            if not declaration.name.startswith(self.test_prefix):
                logger.debug("ignoring helper function %s", declaration.name)
                continue

            leaf = _Branch(name=declaration.name, anchor=declaration.start, is_container=False)
            unknown = [guard for guard in declaration.guards if guard not in declared]
            if unknown:
                logger.debug(
                    "function %s applies undeclared guards %s", declaration.name, ", ".join(unknown)
                )
                leaf.classified = False
                root.leaves.append(leaf)
                continue

            branch = root
            for guard in declaration.guards:
                branch = branch.container(guard, min(guard_offsets[guard], declaration.start))
                applied.add(guard)
            branch.leaves.append(leaf)

        for name, offset in guard_offsets.items():
            if name not in applied:
                root.container(name, offset)

        return root.freeze()


def extract_structure(contract: ParsedContract, test_prefix: str = DEFAULT_TEST_PREFIX) -> ActualNode:
    """Build the actual-structure tree of a contract with a default extractor."""
    return StructureExtractor(test_prefix).extract(contract)
