"""
Line lexer for the tree notation.

Each line of a tree file is classified as blank, comment, root or branch. Branch
lines are split into the column of their connector glyph, the connector kind and
the node text.
"""

import re
from dataclasses import dataclass
from enum import Enum

from branchtree.exceptions import TreeSyntaxError

COMMENT_MARKER = "//"
TAB_WIDTH = 4

# Passthrough columns, then a middle (├── |--) or last (└── `--) connector and a space
BRANCH_PATTERN = re.compile(
    r"^(?P<prefix>[ │|]*)"
    r"(?P<connector>├─{2,}|└─{2,}|\|-{2,}|`-{2,})"
    r"(?P<gap>[ ]*)"
    r"(?P<text>.*)$"
)

# Node text keywords, matched case-insensitively
CONDITION_PATTERN = re.compile(r"^(?P<keyword>when|given)\s+\S", re.IGNORECASE)
ACTION_PATTERN = re.compile(r"^(?P<keyword>it)\s+\S", re.IGNORECASE)


class LineKind(Enum):
    """Classification of one raw line."""

    BLANK = "blank"
    COMMENT = "comment"
    ROOT = "root"
    BRANCH = "branch"


class ConnectorKind(Enum):
    """Connector glyph at the head of a branch line."""

    MIDDLE = "middle"  # has a following sibling
    LAST = "last"


@dataclass(frozen=True)
class TreeLine:
    """A lexed branch line."""

    line_number: int
    column: int
    connector: ConnectorKind
    text: str
    raw: str


def is_skipped(line: str) -> bool:
    """Check whether a line is blank or a comment."""
    stripped = line.strip()
    return not stripped or stripped.startswith(COMMENT_MARKER)


def classify_line(line: str) -> LineKind:
    """
    Classify a raw line without validating it.

    Params:
        line: One line of the tree file, without its line terminator

    Returns:
        BLANK, COMMENT, BRANCH when the line starts with a connector run
        (after passthrough columns), ROOT otherwise
    """
    stripped = line.strip()
    if not stripped:
        return LineKind.BLANK
    if stripped.startswith(COMMENT_MARKER):
        return LineKind.COMMENT
    if BRANCH_PATTERN.match(line.expandtabs(TAB_WIDTH)):
        return LineKind.BRANCH
    return LineKind.ROOT


def lex_branch(line: str, line_number: int) -> TreeLine:
    """
    Split a branch line into column, connector and text.

    Params:
        line: Raw line text
        line_number: 1-based line number used in error messages

    Returns:
        The lexed line

    Raises:
        TreeSyntaxError: When the line has no connector or no text
    """
    expanded = line.expandtabs(TAB_WIDTH).rstrip()
    match = BRANCH_PATTERN.match(expanded)
    if not match:
        raise TreeSyntaxError(
            "expected a branch connector ('├──', '└──', '|--' or '`--')",
            line_number=line_number,
            line_text=line,
        )

    text = match.group("text").strip()
    if not text:
        raise TreeSyntaxError("branch connector without node text", line_number, line)
    if not match.group("gap"):
        raise TreeSyntaxError("expected a space after the branch connector", line_number, line)

    glyph = match.group("connector")[0]
    connector = ConnectorKind.LAST if glyph in ("└", "`") else ConnectorKind.MIDDLE

    return TreeLine(
        line_number=line_number,
        column=len(match.group("prefix")),
        connector=connector,
        text=text,
        raw=line,
    )


def split_lines(text: str) -> list[str]:
    """Split tree text into lines, accepting any line terminator and a BOM."""
    return text.lstrip("﻿").splitlines()
