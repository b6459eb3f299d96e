"""
Tests for per-file pipelines and batch execution.
"""

from pathlib import Path

from branchtree.config import BranchtreeConfig
from branchtree.exceptions import TreeSyntaxError
from branchtree.parsing import parse_tree
from branchtree.pipeline import (
    FileOutcome,
    check_file,
    check_text,
    fix_text,
    run_batch,
    scaffold_file,
    scaffold_text,
    source_path_for,
)
from branchtree.scaffold import ScaffoldEmitter


class TestTextPipelines:
    """Test the text-level pipelines."""

    def test_scaffold_text(self, simple_tree):
        """Scaffolding text equals emitting the parsed tree."""
        assert scaffold_text(simple_tree) == ScaffoldEmitter().emit(parse_tree(simple_tree))

    def test_scaffold_text_formats_when_enabled(self, simple_tree, monkeypatch):
        """Formatting is applied to generated code when configured."""
        monkeypatch.setattr("branchtree.pipeline.format_source", lambda text: "formatted\n")

        assert scaffold_text(simple_tree, BranchtreeConfig(format_output=True)) == "formatted\n"

    def test_check_text(self, simple_tree, scanning_parser):
        """Checking freshly generated text finds nothing."""
        report = check_text(simple_tree, scaffold_text(simple_tree), scanning_parser, file="Foo.tree")

        assert report.passed(strict=True)
        assert report.file == "Foo.tree"

    def test_fix_text(self, simple_tree, scanning_parser):
        """Fixing returns the report of the original text and the patched text."""
        report, fix = fix_text(simple_tree, "contract Foo_Test {\n}\n", scanning_parser)

        assert len(report.errors) == 2
        assert fix.inserted == ("whenX", "test_WhenX_ShouldWork")
        assert check_text(simple_tree, fix.text, scanning_parser).passed()


class TestFilePipelines:
    """Test file pipelines and their pairing convention."""

    def test_source_path_for(self):
        """The test file sits next to the tree file."""
        config = BranchtreeConfig()

        assert source_path_for(Path("test/Foo.tree"), config) == Path("test/Foo.t.sol")

    def test_scaffold_file(self, tmp_path, simple_tree):
        """scaffold_file reads the tree file and returns the generated code."""
        tree_path = tmp_path / "Foo.tree"
        tree_path.write_text(simple_tree, encoding="utf-8")

        outcome = scaffold_file(tree_path, BranchtreeConfig())

        assert not outcome.failed
        assert outcome.output.startswith("// SPDX-License-Identifier: UNLICENSED\n")

    def test_check_file_with_fix(self, tmp_path, simple_tree, scanning_parser):
        """check_file pairs the tree with its test file and can fix it."""
        tree_path = tmp_path / "Foo.tree"
        tree_path.write_text(simple_tree, encoding="utf-8")
        (tmp_path / "Foo.t.sol").write_text("contract Foo_Test {\n}\n", encoding="utf-8")

        outcome = check_file(tree_path, BranchtreeConfig(), scanning_parser, fix=True)

        assert outcome.report.file == str(tree_path)
        assert outcome.fix.changed


class TestRunBatch:
    """Test concurrent batch execution."""

    def test_results_keep_input_order(self):
        """Outcomes are returned in input order."""
        paths = [Path(f"{name}.tree") for name in "abcdef"]

        outcomes = run_batch(paths, lambda path: FileOutcome(path=path, output=path.stem), max_workers=4)

        assert [outcome.output for outcome in outcomes] == list("abcdef")

    def test_failure_is_isolated(self, tmp_path, simple_tree):
        """A malformed file fails alone; the others still complete."""
        good = tmp_path / "Good.tree"
        good.write_text(simple_tree, encoding="utf-8")
        bad = tmp_path / "Bad.tree"
        bad.write_text("Bad\n└── should work\n", encoding="utf-8")
        missing = tmp_path / "Missing.tree"

        outcomes = run_batch(
            [bad, good, missing], lambda path: scaffold_file(path, BranchtreeConfig())
        )

        assert isinstance(outcomes[0].error, TreeSyntaxError)
        assert not outcomes[1].failed
        assert isinstance(outcomes[2].error, OSError)

    def test_empty_batch(self):
        """No paths means no work."""
        assert run_batch([], lambda path: FileOutcome(path=path)) == []
