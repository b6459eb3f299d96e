"""
Naming policy for test functions.

The policy decides how a resolved action chain becomes a test-function name,
including the distinct name used for actions that expect a failure (for
Solidity tests, a revert). It is configuration, so the expected-failure rule can
change without touching the parser, emitter or checker.
"""

import re
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from branchtree.parsing.parser import normalize_title

DEFAULT_EXPECTED_FAILURE_PATTERNS = [r"^it\s+(should\s+)?reverts?\b"]


class PolicyLike(Protocol):
    """Interface the identifier resolver needs from a naming policy."""

    def is_expected_failure(self, title: str) -> bool: ...

    def test_name(self, chain: str, expected_failure: bool) -> str: ...


class NamingPolicy(BaseModel):
    """
    Configurable test naming policy.

    Params:
        test_prefix: Prefix of every test function name
        expected_failure_prefix: Inserted after the test prefix for expected-failure actions
        expected_failure_patterns: Regular expressions searched in the normalized
            (trimmed, whitespace-collapsed, casefolded) action title
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    test_prefix: str = "test_"
    expected_failure_prefix: str = "Revert_"
    expected_failure_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXPECTED_FAILURE_PATTERNS)
    )

    @field_validator("expected_failure_patterns")
    @classmethod
    def _patterns_compile(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid expected-failure pattern '{pattern}': {e}") from e
        return patterns

    @field_validator("test_prefix")
    @classmethod
    def _prefix_is_identifier(cls, prefix: str) -> str:
        if not re.match(r"^[A-Za-z_][A-Za-z0-9_]*$", prefix):
            raise ValueError(f"test prefix '{prefix}' is not a valid identifier start")
        return prefix

    def is_expected_failure(self, title: str) -> bool:
        """Check whether an action title signals an expected failure."""
        normalized = normalize_title(title)
        return any(re.search(pattern, normalized) for pattern in self.expected_failure_patterns)

    def test_name(self, chain: str, expected_failure: bool) -> str:
        """
        Build a test-function name from a resolved segment chain.

        Params:
            chain: Segments of the ancestor conditions and the action, joined by '_'
            expected_failure: Whether the action expects a failure

        Returns:
            The test-function name
        """
        if expected_failure:
            return f"{self.test_prefix}{self.expected_failure_prefix}{chain}"
        return f"{self.test_prefix}{chain}"


DEFAULT_POLICY = NamingPolicy()
