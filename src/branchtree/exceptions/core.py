"""
Exception classes for branchtree processing.

This module defines specific exception types for the error conditions that can
occur while parsing tree files, resolving identifiers, and reading the target
source of a check.
"""

from dataclasses import dataclass


@dataclass
class ErrorContext:
    """
    Location information attached to an error.

    Params:
        line_number: 1-based line number within the tree file
        line_text: The raw text of the offending line
        file: Path of the file being processed, if known
    """

    line_number: int | None = None
    line_text: str | None = None
    file: str | None = None

    def format_location(self) -> str:
        """
        Format location information as indented message lines.

        Returns:
            Formatted location string, empty when nothing is known
        """
        lines = []

        if self.line_number is not None:
            if self.file:
                lines.append(f"  at {self.file}:{self.line_number}")
            else:
                lines.append(f"  at line {self.line_number}")
        elif self.file:
            lines.append(f"  in {self.file}")

        if self.line_text is not None:
            lines.append(f"  line: {self.line_text.rstrip()}")

        return "\n".join(lines)


class BranchtreeError(Exception):
    """Base exception for all branchtree errors."""

    pass


class TreeSyntaxError(BranchtreeError):
    """Raised when a tree file does not follow the tree notation."""

    def __init__(self, reason: str, line_number: int | None = None, line_text: str | None = None):
        """
        Initialize the exception.

        Params:
            reason: Why the line was rejected
            line_number: 1-based line number of the offending line
            line_text: The raw text of the offending line
        """
        self.reason = reason
        self.line_number = line_number
        self.context = ErrorContext(line_number=line_number, line_text=line_text)

        location_info = self.context.format_location()
        message = f"Syntax error: {reason}"
        super().__init__(f"{message}\n{location_info}" if location_info else message)


class DuplicateSiblingError(TreeSyntaxError):
    """Raised when two siblings share the same normalized title."""

    def __init__(self, title: str, first_line: int, line_number: int, line_text: str | None = None):
        """
        Initialize the exception.

        Params:
            title: Title of the second occurrence
            first_line: Line number of the first occurrence
            line_number: Line number of the second occurrence
            line_text: The raw text of the second occurrence
        """
        self.title = title
        self.first_line = first_line
        super().__init__(
            f"duplicate sibling '{title}' (first declared at line {first_line})",
            line_number=line_number,
            line_text=line_text,
        )


class IdentifierError(BranchtreeError):
    """Raised when a title cannot be turned into a source identifier."""

    def __init__(self, title: str, reason: str = "sanitizes to an empty identifier"):
        """
        Initialize the exception.

        Params:
            title: The title that could not be resolved
            reason: Why the title was rejected
        """
        self.title = title
        self.reason = reason
        super().__init__(f"Cannot derive an identifier from '{title}': {reason}")


class IdentifierCollisionError(IdentifierError):
    """Raised when disambiguation cannot find a free identifier."""

    def __init__(self, identifier: str, attempts: int):
        """
        Initialize the exception.

        Params:
            identifier: The base identifier that kept colliding
            attempts: Number of suffixes tried
        """
        self.identifier = identifier
        self.attempts = attempts
        super().__init__(identifier, f"no free suffix after {attempts} attempts")


class ExternalParseError(BranchtreeError):
    """Raised when the target-language parser cannot read existing source."""

    def __init__(self, reason: str, file: str | None = None, diagnostics: list[str] | None = None):
        """
        Initialize the exception.

        Params:
            reason: Short description of the failure
            file: Path of the source file, if known
            diagnostics: Messages reported by the external parser
        """
        self.reason = reason
        self.diagnostics = diagnostics or []
        self.context = ErrorContext(file=file)

        lines = [f"Cannot parse target source: {reason}"]
        location_info = self.context.format_location()
        if location_info:
            lines.append(location_info)
        lines.extend(f"  {diagnostic}" for diagnostic in self.diagnostics)
        super().__init__("\n".join(lines))


class ConfigurationError(BranchtreeError):
    """Raised when a configuration file cannot be loaded or validated."""

    def __init__(self, path: str, reason: str):
        """
        Initialize the exception.

        Params:
            path: The configuration file
            reason: Why loading failed
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration in '{path}': {reason}")
