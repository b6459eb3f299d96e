"""
Parser for the branching tree notation.

This module turns tree-notation text into a Specification. The tree is built
bottom-up with an explicit stack of open ancestors: every node is frozen into an
immutable SpecNode as soon as the stack pops it, so no node ever needs a
reference to its parent.
"""

import logging
import re
from dataclasses import dataclass, field

from branchtree.core.tree_node import NodeKind, SpecNode, Specification
from branchtree.exceptions import DuplicateSiblingError, TreeSyntaxError
from branchtree.parsing.lexer import (
    ACTION_PATTERN,
    CONDITION_PATTERN,
    TAB_WIDTH,
    ConnectorKind,
    LineKind,
    TreeLine,
    classify_line,
    is_skipped,
    lex_branch,
    split_lines,
)

logger = logging.getLogger(__name__)

# A child connector may start at most one connector width (plus its space) right of its parent's
INDENT_STEP_LIMIT = 4

# A nested step this many times the narrowest step seen so far skips a level
LEVEL_SKIP_FACTOR = 2

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    """
    Normalize a title for sibling comparison.

    Params:
        title: Raw node title

    Returns:
        Title stripped, with whitespace runs collapsed, casefolded
    """
    return _WHITESPACE_RUN.sub(" ", title.strip()).casefold()


def classify_text(text: str, line_number: int, line_text: str) -> NodeKind:
    """
    Determine the node kind from the keyword that starts the node text.

    Raises:
        TreeSyntaxError: When the text starts with no recognized keyword
    """
    if CONDITION_PATTERN.match(text):
        return NodeKind.CONDITION
    if ACTION_PATTERN.match(text):
        return NodeKind.ACTION
    keyword = text.split(maxsplit=1)[0]
    raise TreeSyntaxError(
        f"unrecognized keyword '{keyword}' (expected 'when', 'given' or 'it')",
        line_number=line_number,
        line_text=line_text,
    )


@dataclass
class _OpenNode:
    """A node still on the parser stack; its children may still grow."""

    title: str
    kind: NodeKind | None
    line_number: int
    column: int
    line_text: str = ""
    children: list[SpecNode] = field(default_factory=list)
    seen_titles: dict[str, int] = field(default_factory=dict)
    child_connectors: list[tuple[int, ConnectorKind]] = field(default_factory=list)

    def add_child_line(self, line: TreeLine) -> None:
        """Register a child line, rejecting duplicates and noting connector misuse."""
        key = normalize_title(line.text)
        if key in self.seen_titles:
            raise DuplicateSiblingError(
                line.text,
                first_line=self.seen_titles[key],
                line_number=line.line_number,
                line_text=line.raw,
            )
        self.seen_titles[key] = line.line_number

        if self.child_connectors and self.child_connectors[-1][1] is ConnectorKind.LAST:
            logger.warning(
                "line %d: last-sibling connector is followed by a sibling at line %d",
                self.child_connectors[-1][0],
                line.line_number,
            )
        self.child_connectors.append((line.line_number, line.connector))

    def freeze(self) -> SpecNode:
        """
        Close this node and return its immutable form.

        Raises:
            TreeSyntaxError: When a condition ends up without children
        """
        if self.kind is NodeKind.CONDITION and not self.children:
            raise TreeSyntaxError(
                f"condition '{self.title}' has no children",
                line_number=self.line_number,
                line_text=self.line_text,
            )
        if self.child_connectors and self.child_connectors[-1][1] is ConnectorKind.MIDDLE:
            logger.warning(
                "line %d: middle-sibling connector is used for the last child of '%s'",
                self.child_connectors[-1][0],
                self.title,
            )
        return SpecNode(
            title=self.title,
            kind=self.kind,
            children=tuple(self.children),
            source_line=self.line_number,
        )


class TreeParser:
    """Parser for tree-notation files."""

    def parse(self, text: str) -> Specification:
        """
        Parse tree-notation text into a Specification.

        Params:
            text: Full content of one tree file

        Returns:
            The parsed specification

        Raises:
            TreeSyntaxError: On a missing root, a line without connector or
                keyword, malformed indentation, or a childless condition
            DuplicateSiblingError: When two siblings share a normalized title
        """
        lines = split_lines(text)
        root_index = self._find_root(lines)
        root_line = lines[root_index].expandtabs(TAB_WIDTH)
        root_indent = len(root_line) - len(root_line.lstrip())

        stack = [
            _OpenNode(
                title=root_line.strip(),
                kind=None,
                line_number=root_index + 1,
                column=root_indent - 1,
                line_text=lines[root_index],
            )
        ]

        steps: list[int] = []
        for index in range(root_index + 1, len(lines)):
            raw = lines[index]
            if is_skipped(raw):
                continue
            line = lex_branch(raw, index + 1)
            self._place(stack, line, steps)

        while len(stack) > 1:
            self._close_top(stack)

        root = stack.pop().freeze()
        logger.debug("parsed tree '%s' with %d top-level nodes", root.title, len(root.children))
        return Specification(root=root)

    def _find_root(self, lines: list[str]) -> int:
        for index, raw in enumerate(lines):
            kind = classify_line(raw)
            if kind in (LineKind.BLANK, LineKind.COMMENT):
                continue
            if kind is LineKind.BRANCH:
                raise TreeSyntaxError(
                    "missing root: the first line must be a plain title without connector",
                    line_number=index + 1,
                    line_text=raw,
                )
            return index
        raise TreeSyntaxError("missing root: the tree file has no title line")

    def _place(self, stack: list[_OpenNode], line: TreeLine, steps: list[int]) -> None:
        """
        Attach one branch line under the nearest open ancestor with a smaller column.

        Params:
            stack: Open ancestors, root first
            line: The lexed branch line
            steps: Column steps between nested connectors seen so far; the
                narrowest one is taken as the tree's indentation unit
        """
        depth = len(stack) - 1
        while depth > 0 and stack[depth].column >= line.column:
            depth -= 1

        parent = stack[depth]
        if parent.column >= line.column:
            raise TreeSyntaxError(
                "branch is indented left of the root title",
                line_number=line.line_number,
                line_text=line.raw,
            )
        step = line.column - parent.column
        nested = depth > 0
        if step > INDENT_STEP_LIMIT or (nested and steps and step >= LEVEL_SKIP_FACTOR * min(steps)):
            raise TreeSyntaxError(
                "malformed indentation: branch is more than one level deeper than its parent",
                line_number=line.line_number,
                line_text=line.raw,
            )
        if nested:
            steps.append(step)
        if parent.kind is NodeKind.ACTION:
            raise TreeSyntaxError(
                f"action '{parent.title}' cannot have children",
                line_number=line.line_number,
                line_text=line.raw,
            )

        kind = classify_text(line.text, line.line_number, line.raw)
        parent.add_child_line(line)

        while len(stack) - 1 > depth:
            self._close_top(stack)
        stack.append(
            _OpenNode(
                title=line.text,
                kind=kind,
                line_number=line.line_number,
                column=line.column,
                line_text=line.raw,
            )
        )

    def _close_top(self, stack: list[_OpenNode]) -> None:
        node = stack.pop().freeze()
        stack[-1].children.append(node)


def parse_tree(text: str) -> Specification:
    """
    Parse tree-notation text with a default TreeParser.

    Params:
        text: Full content of one tree file

    Returns:
        The parsed specification
    """
    return TreeParser().parse(text)
