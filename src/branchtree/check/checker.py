"""
Consistency checker between a specification and existing test source.

Both trees are aligned top-down with identifiers as the join key: an expected
node matches an actual sibling of the same resolved identifier. Each level
yields missing, extra, reordered and structure-changed findings; matched
containers are aligned recursively. The pass never stops at the first finding.
"""

import logging

from branchtree.check.report import PATH_SEPARATOR, CheckReport, Mismatch, MismatchKind, Severity
from branchtree.config import BranchtreeConfig
from branchtree.core.tree_node import ActualNode, Specification
from branchtree.core.types import TitlePath
from branchtree.naming.resolver import ResolvedNode, resolve_specification
from branchtree.structure.declarations import ParsedSource
from branchtree.structure.extractor import StructureExtractor

logger = logging.getLogger(__name__)


def stable_subsequence(positions: list[int]) -> set[int]:
    """
    Find the longest increasing subsequence of positions.

    Ties are broken towards the earliest elements so the result is stable.

    Params:
        positions: Actual positions of matched siblings, in expected order

    Returns:
        Indices (into positions) of the elements that keep their relative order
    """
    if not positions:
        return set()

    lengths = [1] * len(positions)
    previous = [-1] * len(positions)
    for i in range(len(positions)):
        for j in range(i):
            if positions[j] < positions[i] and lengths[j] + 1 > lengths[i]:
                lengths[i] = lengths[j] + 1
                previous[i] = j

    best = max(range(len(positions)), key=lambda i: (lengths[i], -i))
    kept = set()
    while best != -1:
        kept.add(best)
        best = previous[best]
    return kept


def _describe(node: ResolvedNode) -> str:
    return "modifier" if node.is_container else "test function"


class _Alignment:
    """State of one check run."""

    def __init__(self, expected: ResolvedNode, actual: ActualNode):
        self.expected = expected
        self.actual = actual
        self.findings: list[Mismatch] = []

        self.expected_paths: dict[str, tuple[str, ...]] = {}
        for node in expected.walk():
            self.expected_paths[node.identifier] = node.guards + (node.identifier,)

        self.actual_paths: set[tuple[str, ...]] = set()
        self.actual_locations: dict[str, tuple[str, ...]] = {}
        self.actual_nodes: dict[str, ActualNode] = {}
        for path, node in actual.walk():
            self.actual_paths.add(path)
            self.actual_locations.setdefault(path[-1], path)
            self.actual_nodes.setdefault(path[-1], node)

    def add(self, severity: Severity, kind: MismatchKind, path: TitlePath, message: str, **values):
        self.findings.append(Mismatch(severity=severity, kind=kind, path=path, message=message, **values))

    def location(self, name: str) -> str:
        path = self.actual_locations[name]
        return PATH_SEPARATOR.join((self.actual.name,) + path)

    def misplaced(self, node: ResolvedNode) -> None:
        """Report an expected node that the source declares at another location."""
        if self.actual_nodes[node.identifier].classified:
            message = (
                f"{_describe(node)} '{node.identifier}' is declared at "
                f"'{self.location(node.identifier)}' instead of under its guard chain"
            )
        else:
            message = (
                f"test function '{node.identifier}' applies guards that are not declared in the contract"
            )
        self.add(
            Severity.ERROR,
            MismatchKind.STRUCTURE_CHANGED,
            node.path,
            message,
            expected=PATH_SEPARATOR.join(node.guards + (node.identifier,)),
            actual=self.location(node.identifier),
        )

    def missing_subtree(self, node: ResolvedNode) -> None:
        """Report a node absent from its place, and its descendants; nodes found elsewhere are misplaced."""
        if node.identifier in self.actual_locations:
            self.misplaced(node)
            return
        self.add(
            Severity.ERROR,
            MismatchKind.MISSING,
            node.path,
            f"{_describe(node)} '{node.identifier}' is missing",
            expected=node.identifier,
        )
        for child in node.children:
            self.missing_subtree(child)

    def align(self, expected: ResolvedNode, actual: ActualNode, parent_path: TitlePath) -> None:
        """Align the children of one matched pair of containers."""
        actual_by_name: dict[str, tuple[int, ActualNode]] = {}
        for index, child in enumerate(actual.children):
            actual_by_name.setdefault(child.name, (index, child))

        consumed: set[str] = set()
        matched: list[tuple[str, int, int]] = []
        outcomes: list[tuple[ResolvedNode, ActualNode | None]] = []

        for expected_index, child in enumerate(expected.children):
            found = actual_by_name.get(child.identifier)
            if found is None:
                outcomes.append((child, None))
                continue
            actual_index, actual_child = found
            consumed.add(child.identifier)
            outcomes.append((child, actual_child))
            if actual_child.is_container == child.is_container and actual_child.classified:
                matched.append((child.identifier, expected_index, actual_index))

        kept = stable_subsequence([actual_index for _, _, actual_index in matched])
        reordered = {
            identifier: (expected_index, actual_index)
            for i, (identifier, expected_index, actual_index) in enumerate(matched)
            if i not in kept
        }

        for child, actual_child in outcomes:
            if actual_child is None:
                self.missing_subtree(child)
                continue

            if actual_child.is_container != child.is_container:
                self.add(
                    Severity.ERROR,
                    MismatchKind.STRUCTURE_CHANGED,
                    child.path,
                    f"'{child.identifier}' should be a {_describe(child)}",
                    expected=_describe(child),
                    actual="modifier" if actual_child.is_container else "test function",
                )
                continue

            if not actual_child.classified:
                self.add(
                    Severity.ERROR,
                    MismatchKind.STRUCTURE_CHANGED,
                    child.path,
                    f"test function '{child.identifier}' applies guards that are not declared in the contract",
                    expected=PATH_SEPARATOR.join(child.guards + (child.identifier,)),
                    actual=self.location(child.identifier),
                )
                continue

            if child.identifier in reordered:
                expected_index, actual_index = reordered[child.identifier]
                self.add(
                    Severity.WARNING,
                    MismatchKind.REORDERED,
                    child.path,
                    f"{_describe(child)} '{child.identifier}' is declared out of order",
                    expected=f"position {expected_index + 1}",
                    actual=f"position {actual_index + 1}",
                )

            if child.is_container:
                self.align(child, actual_child, child.path)

        for actual_child in actual.children:
            if actual_child.name in consumed:
                continue
            path = parent_path + (actual_child.name,)
            expected_path = self.expected_paths.get(actual_child.name)
            if expected_path is not None:
                if expected_path in self.actual_paths:
                    self.add(
                        Severity.ERROR,
                        MismatchKind.STRUCTURE_CHANGED,
                        path,
                        f"'{actual_child.name}' is also declared outside its guard chain",
                        expected=PATH_SEPARATOR.join(expected_path),
                        actual=self.location(actual_child.name),
                    )
                # otherwise the expected side already reported it as misplaced
                continue
            if actual_child.classified:
                message = f"'{actual_child.name}' is not in the specification"
            else:
                message = f"'{actual_child.name}' applies guards that are not declared in the contract"
            self.add(Severity.WARNING, MismatchKind.EXTRA, path, message, actual=actual_child.name)


class ConsistencyChecker:
    """Compares specifications with the structure of existing test source."""

    def __init__(self, config: BranchtreeConfig | None = None):
        self.config = config or BranchtreeConfig()
        self.extractor = StructureExtractor(self.config.naming.test_prefix)

    def resolve(self, spec: Specification) -> ResolvedNode:
        """Resolve identifiers with the configured naming policy."""
        return resolve_specification(spec, self.config.naming)

    def check(self, spec: Specification, actual: ActualNode, file: str | None = None) -> CheckReport:
        """
        Compare a specification with an actual-structure tree.

        Params:
            spec: The expected structure
            actual: The observed structure
            file: Tree file name recorded in the report

        Returns:
            Report with every mismatch found

        Raises:
            IdentifierError: When a title cannot be turned into an identifier
        """
        expected = self.resolve(spec)
        alignment = _Alignment(expected, actual)

        if actual.name != expected.identifier:
            alignment.add(
                Severity.ERROR,
                MismatchKind.STRUCTURE_CHANGED,
                (),
                f"contract is named '{actual.name}' instead of '{expected.identifier}'",
                expected=expected.identifier,
                actual=actual.name,
            )

        alignment.align(expected, actual, ())
        logger.debug(
            "checked %s: %d mismatches", file or expected.identifier, len(alignment.findings)
        )
        return CheckReport(container=expected.identifier, mismatches=alignment.findings, file=file)

    def check_source(self, spec: Specification, source: ParsedSource, file: str | None = None) -> CheckReport:
        """
        Compare a specification with a parsed source file.

        The contract named after the specification root is used, or the first
        contract; a file without contracts yields a single missing finding.
        """
        expected_name = self.resolve(spec).identifier
        contract = source.select(expected_name)
        if contract is None:
            mismatch = Mismatch(
                severity=Severity.ERROR,
                kind=MismatchKind.MISSING,
                path=(),
                message=f"contract '{expected_name}' is missing",
                expected=expected_name,
            )
            return CheckReport(container=expected_name, mismatches=(mismatch,), file=file)

        return self.check(spec, self.extractor.extract(contract), file=file)
