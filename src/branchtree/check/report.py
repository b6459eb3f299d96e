"""
Check report model.

Mismatches are ordinary output of a check, not failures of the checker: every
divergence is recorded, and only severity decides whether the check fails.
"""

from enum import Enum

from attrs import field, frozen

from branchtree.core.types import TitlePath

PATH_SEPARATOR = " > "


class Severity(Enum):
    """How a mismatch affects the check result."""

    ERROR = "error"
    WARNING = "warning"


class MismatchKind(Enum):
    """Kind of structural divergence."""

    MISSING = "missing"
    EXTRA = "extra"
    REORDERED = "reordered"
    STRUCTURE_CHANGED = "structure_changed"


@frozen
class Mismatch:
    """
    One divergence between a specification and existing source.

    Params:
        severity: Error (blocking) or warning (advisory)
        kind: Missing, extra, reordered or structure changed
        path: Titles from below the root down to the node; an extra node ends
            with its declared name
        message: Human readable description
        expected: What the specification expects, if applicable
        actual: What the source declares, if applicable
    """

    severity: Severity
    kind: MismatchKind
    path: TitlePath = field(converter=tuple)
    message: str
    expected: str | None = None
    actual: str | None = None

    @property
    def path_text(self) -> str:
        return PATH_SEPARATOR.join(self.path)

    def as_row(self) -> dict[str, str]:
        """Render the mismatch as a {severity, path, message} row."""
        return {
            "severity": self.severity.value,
            "path": self.path_text,
            "message": self.message,
        }


@frozen
class CheckReport:
    """
    All mismatches found for one specification.

    Params:
        container: Expected contract name
        mismatches: Findings in report order
        file: Tree file the report belongs to, if known
    """

    container: str
    mismatches: tuple[Mismatch, ...] = field(default=(), converter=tuple)
    file: str | None = None

    @property
    def errors(self) -> list[Mismatch]:
        return [m for m in self.mismatches if m.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Mismatch]:
        return [m for m in self.mismatches if m.severity is Severity.WARNING]

    @property
    def missing_paths(self) -> frozenset[TitlePath]:
        return frozenset(m.path for m in self.mismatches if m.kind is MismatchKind.MISSING)

    def passed(self, strict: bool = False) -> bool:
        """
        Whether the check passes.

        Params:
            strict: Also fail on warnings

        Returns:
            False when an error-severity mismatch exists (or any mismatch in strict mode)
        """
        if strict:
            return not self.mismatches
        return not self.errors

    def rows(self) -> list[dict[str, str]]:
        """Render every mismatch as a report row, in report order."""
        return [mismatch.as_row() for mismatch in self.mismatches]
