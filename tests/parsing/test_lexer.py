"""
Tests for the tree notation line lexer.
"""

import pytest

from branchtree.exceptions import TreeSyntaxError
from branchtree.parsing import ConnectorKind, LineKind, classify_line, lex_branch


class TestClassifyLine:
    """Test raw line classification."""

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("", LineKind.BLANK),
            ("   ", LineKind.BLANK),
            ("// a comment", LineKind.COMMENT),
            ("   // indented comment", LineKind.COMMENT),
            ("Foo_Test", LineKind.ROOT),
            ("├── when a", LineKind.BRANCH),
            ("│   └── it b", LineKind.BRANCH),
            ("|-- when a", LineKind.BRANCH),
            ("    `-- it b", LineKind.BRANCH),
        ],
    )
    def test_classification(self, line, expected):
        """Lines are classified by their leading characters."""
        assert classify_line(line) is expected


class TestLexBranch:
    """Test splitting of branch lines."""

    def test_column_counts_passthrough_prefix(self):
        """The column is the offset of the connector glyph."""
        line = lex_branch("│   └── it works", 7)

        assert line.column == 4
        assert line.connector is ConnectorKind.LAST
        assert line.text == "it works"
        assert line.line_number == 7

    def test_middle_connector(self):
        """'├──' and '|--' mark nodes with a following sibling."""
        assert lex_branch("├── it a", 1).connector is ConnectorKind.MIDDLE
        assert lex_branch("|-- it a", 1).connector is ConnectorKind.MIDDLE

    def test_long_connector_run(self):
        """Connectors may use more than two dashes."""
        line = lex_branch("└──── when a", 1)

        assert line.text == "when a"
        assert line.column == 0

    def test_trailing_whitespace_is_ignored(self):
        """Node text is stripped."""
        assert lex_branch("└── it a   ", 1).text == "it a"

    def test_connector_without_text(self):
        """A connector alone is rejected."""
        with pytest.raises(TreeSyntaxError) as exc_info:
            lex_branch("└──", 3)

        assert exc_info.value.line_number == 3
