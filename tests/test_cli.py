"""
Tests for the command-line interface.

solc is replaced by the scanning parser double, so the check command runs
without a compiler.
"""

import pytest
from typer.testing import CliRunner

from branchtree.cli import app, expand_paths
from branchtree.parsing import parse_tree
from branchtree.scaffold import ScaffoldEmitter

runner = CliRunner()


class _FixedParser:
    """Stands in for SolcParser and hands out one parser for every file."""

    def __init__(self, parser):
        self.parser = parser

    def for_file(self, file):
        return self.parser


@pytest.fixture
def workspace(tmp_path, monkeypatch, scanning_parser):
    """Empty working directory with solc replaced."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("branchtree.cli.SolcParser", lambda executable: _FixedParser(scanning_parser))
    return tmp_path


@pytest.fixture
def tree_file(workspace, simple_tree):
    path = workspace / "Foo.tree"
    path.write_text(simple_tree, encoding="utf-8")
    return path


class TestScaffoldCommand:
    """Test `branchtree scaffold`."""

    def test_prints_to_stdout(self, tree_file, simple_tree):
        """Without -w the generated code is printed."""
        result = runner.invoke(app, ["scaffold", str(tree_file)])

        assert result.exit_code == 0
        assert result.output == ScaffoldEmitter().emit(parse_tree(simple_tree))

    def test_vm_skip_option(self, tree_file):
        """-S adds vm.skip(true) to every test."""
        result = runner.invoke(app, ["scaffold", "-S", str(tree_file)])

        assert "vm.skip(true);" in result.output

    def test_writes_files(self, tree_file):
        """-w writes the paired .t.sol file."""
        result = runner.invoke(app, ["scaffold", "-w", str(tree_file)])

        assert result.exit_code == 0
        assert "contract Foo_Test {" in (tree_file.parent / "Foo.t.sol").read_text(encoding="utf-8")

    def test_existing_files_are_kept(self, tree_file):
        """Existing files are only replaced with -f."""
        target = tree_file.parent / "Foo.t.sol"
        target.write_text("keep me\n", encoding="utf-8")

        runner.invoke(app, ["scaffold", "-w", str(tree_file)])
        assert target.read_text(encoding="utf-8") == "keep me\n"

        runner.invoke(app, ["scaffold", "-w", "-f", str(tree_file)])
        assert "contract Foo_Test {" in target.read_text(encoding="utf-8")

    def test_force_requires_write(self, tree_file):
        """-f without -w is a usage error."""
        result = runner.invoke(app, ["scaffold", "-f", str(tree_file)])

        assert result.exit_code != 0

    def test_malformed_tree(self, workspace):
        """Syntax errors fail the command."""
        path = workspace / "Bad.tree"
        path.write_text("Bad\n└── should work\n", encoding="utf-8")

        result = runner.invoke(app, ["scaffold", str(path)])

        assert result.exit_code == 1
        assert "Syntax error" in result.output

    def test_glob_patterns(self, workspace, tree_file):
        """Glob patterns expand to the matching tree files."""
        result = runner.invoke(app, ["scaffold", "*.tree"])

        assert result.exit_code == 0
        assert "contract Foo_Test {" in result.output


class TestCheckCommand:
    """Test `branchtree check`."""

    def test_consistent_file(self, tree_file, simple_tree):
        """A freshly generated file passes."""
        (tree_file.parent / "Foo.t.sol").write_text(
            ScaffoldEmitter().emit(parse_tree(simple_tree)), encoding="utf-8"
        )

        result = runner.invoke(app, ["check", str(tree_file)])

        assert result.exit_code == 0
        assert "All files are consistent with their trees." in result.output

    def test_missing_declarations_fail(self, tree_file):
        """Missing declarations are reported and fail the command."""
        (tree_file.parent / "Foo.t.sol").write_text("contract Foo_Test {\n}\n", encoding="utf-8")

        result = runner.invoke(app, ["check", str(tree_file)])

        assert result.exit_code == 1
        assert "[missing] when x > it should work" in result.output

    def test_fix_writes_file(self, tree_file):
        """--fix inserts the missing declarations and passes."""
        target = tree_file.parent / "Foo.t.sol"
        target.write_text("contract Foo_Test {\n}\n", encoding="utf-8")

        result = runner.invoke(app, ["check", "--fix", str(tree_file)])

        assert result.exit_code == 0
        assert "inserted 2 declaration(s)" in result.output
        assert "function test_WhenX_ShouldWork()" in target.read_text(encoding="utf-8")

    def test_fix_to_stdout(self, tree_file):
        """--fix --stdout prints the patched file and leaves it untouched."""
        target = tree_file.parent / "Foo.t.sol"
        target.write_text("contract Foo_Test {\n}\n", encoding="utf-8")

        result = runner.invoke(app, ["check", "--fix", "--stdout", str(tree_file)])

        assert "function test_WhenX_ShouldWork()" in result.output
        assert target.read_text(encoding="utf-8") == "contract Foo_Test {\n}\n"

    def test_strict_fails_on_warnings(self, workspace):
        """--strict turns reorder warnings into failures."""
        tree = workspace / "Foo.tree"
        tree.write_text("Foo\n├── it a\n└── it b\n", encoding="utf-8")
        (workspace / "Foo.t.sol").write_text(
            "contract Foo {\n"
            "  function test_B() external {\n  }\n\n"
            "  function test_A() external {\n  }\n"
            "}\n",
            encoding="utf-8",
        )

        assert runner.invoke(app, ["check", str(tree)]).exit_code == 0
        assert runner.invoke(app, ["check", "--strict", str(tree)]).exit_code == 1

    def test_missing_test_file(self, tree_file):
        """A tree without its test file fails."""
        result = runner.invoke(app, ["check", str(tree_file)])

        assert result.exit_code == 1
        assert "error:" in result.output


class TestConfigOption:
    """Test configuration loading from the command line."""

    def test_config_file(self, workspace, tree_file):
        """--config applies an explicit configuration file."""
        config = workspace / "custom.toml"
        config.write_text("indent = 4\n", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(config), "scaffold", str(tree_file)])

        assert "    modifier whenX() {" in result.output

    def test_invalid_config(self, workspace, tree_file):
        """A broken configuration is a usage error."""
        (workspace / "branchtree.toml").write_text("indent = 0\n", encoding="utf-8")

        result = runner.invoke(app, ["scaffold", str(tree_file)])

        assert result.exit_code != 0


def test_expand_paths_keeps_plain_paths(tmp_path):
    """Plain paths are kept even when they do not exist yet."""
    assert [str(p) for p in expand_paths(["a.tree", "b.tree"])] == ["a.tree", "b.tree"]
