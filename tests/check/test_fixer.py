"""
Tests for the missing-only autofix.
"""

from branchtree.check import ConsistencyChecker, apply_fixes
from branchtree.parsing import parse_tree
from branchtree.scaffold import ScaffoldEmitter


def fix(scanning_parser, tree, source_text):
    spec = parse_tree(tree)
    source = scanning_parser.parse(source_text)
    report = ConsistencyChecker().check_source(spec, source)
    return apply_fixes(spec, source_text, source, report)


class TestApplyFixes:
    """Test splicing of missing declarations."""

    def test_function_after_existing_guard(self, scanning_parser):
        """A missing function lands right after its guard."""
        source = "contract Foo {\n  modifier whenA() {\n    _;\n  }\n}\n"

        result = fix(scanning_parser, "Foo\n└── when A\n    └── it does X\n", source)

        assert result.inserted == ("test_WhenA_DoesX",)
        assert result.text == (
            "contract Foo {\n"
            "  modifier whenA() {\n"
            "    _;\n"
            "  }\n"
            "\n"
            "  function test_WhenA_DoesX()\n"
            "    external\n"
            "    whenA\n"
            "  {\n"
            "    // it does X\n"
            "  }\n"
            "}\n"
        )

    def test_first_declaration_goes_after_opening_brace(self, scanning_parser):
        """Without a preceding declaration, code is inserted at the top of the body."""
        source = "contract Foo {\n  function test_B() external {\n    // it b\n  }\n}\n"

        result = fix(scanning_parser, "Foo\n├── it a\n└── it b\n", source)

        assert result.text == (
            "contract Foo {\n"
            "  function test_A() external {\n"
            "    // it a\n"
            "  }\n"
            "\n"
            "  function test_B() external {\n"
            "    // it b\n"
            "  }\n"
            "}\n"
        )

    def test_fixed_source_is_consistent(self, scanning_parser, deep_tree):
        """After fixing, a second check finds nothing missing."""
        spec = parse_tree(deep_tree)
        emitted = ScaffoldEmitter().emit(spec)
        # Drop everything below the first guard
        partial = emitted[: emitted.index("  modifier")] + "}\n"

        result = fix(scanning_parser, deep_tree, partial)
        report = ConsistencyChecker().check_source(spec, scanning_parser.parse(result.text))

        assert result.changed
        assert report.mismatches == ()
        assert result.text == emitted

    def test_missing_contract_is_appended(self, scanning_parser, simple_tree):
        """A file without the contract gets the whole contract appended."""
        source = "// SPDX-License-Identifier: UNLICENSED\npragma solidity 0.8.0;\n"

        result = fix(scanning_parser, simple_tree, source)

        assert result.text == ScaffoldEmitter().emit(parse_tree(simple_tree))
        assert result.inserted == ("whenX", "test_WhenX_ShouldWork")

    def test_nothing_missing(self, scanning_parser, simple_tree):
        """Consistent source is returned unchanged."""
        source = ScaffoldEmitter().emit(parse_tree(simple_tree))

        result = fix(scanning_parser, simple_tree, source)

        assert result.text == source
        assert not result.changed

    def test_other_findings_are_not_fixed(self, scanning_parser):
        """Extra and reordered declarations are left alone."""
        source = (
            "contract Foo {\n"
            "  function test_B() external {\n  }\n\n"
            "  function test_A() external {\n  }\n\n"
            "  function test_Z() external {\n  }\n"
            "}\n"
        )

        result = fix(scanning_parser, "Foo\n├── it a\n└── it b\n", source)

        assert result.text == source
        assert not result.changed
