"""
Tree node classes shared by every pipeline stage.

The specification side (SpecNode, Specification) is built by the tree parser;
the observed side (ActualNode) is rebuilt from existing test source. Both are
immutable and own their children; no node refers back to its parent.
"""

from enum import Enum
from typing import Iterator

from attrs import field, frozen

from branchtree.core.types import TitlePath


class NodeKind(Enum):
    """Kind of a non-root specification node."""

    CONDITION = "condition"
    ACTION = "action"


@frozen
class SpecNode:
    """
    One node of a parsed tree file.

    The root node carries the suite title and no kind. Conditions always have
    at least one child and actions are always leaves.
    """

    title: str
    kind: NodeKind | None
    children: tuple["SpecNode", ...] = field(default=(), converter=tuple)
    source_line: int = 0

    @property
    def is_root(self) -> bool:
        return self.kind is None

    @property
    def is_condition(self) -> bool:
        return self.kind is NodeKind.CONDITION

    @property
    def is_action(self) -> bool:
        return self.kind is NodeKind.ACTION


@frozen
class Specification:
    """A parsed tree file: exactly one root node."""

    root: SpecNode

    @property
    def title(self) -> str:
        return self.root.title

    def walk(self) -> Iterator[tuple[TitlePath, SpecNode]]:
        """
        Iterate over all non-root nodes depth-first, left-to-right.

        Returns:
            Iterator of (path, node) pairs where path holds the titles from the
            first level below the root down to the node itself
        """
        stack: list[tuple[TitlePath, SpecNode]] = [
            ((child.title,), child) for child in reversed(self.root.children)
        ]
        while stack:
            path, node = stack.pop()
            yield path, node
            stack.extend((path + (child.title,), child) for child in reversed(node.children))


@frozen
class ActualNode:
    """
    One node of the structure recovered from existing test source.

    Containers correspond to guards (or the contract at the root), leaves to
    test functions. Unclassified leaves are functions that do not follow the
    guard-chain convention.
    """

    name: str
    is_container: bool
    children: tuple["ActualNode", ...] = field(default=(), converter=tuple)
    classified: bool = True

    def walk(self) -> Iterator[tuple[tuple[str, ...], "ActualNode"]]:
        """Iterate over all descendants depth-first with their name paths."""
        stack = [((child.name,), child) for child in reversed(self.children)]
        while stack:
            path, node = stack.pop()
            yield path, node
            stack.extend((path + (child.name,), child) for child in reversed(node.children))
