"""
Missing-only autofix.

Splices generated declarations for missing paths into existing source. Each
declaration goes right after the nearest preceding declaration (in tree order)
that the file already has, or right after the contract's opening brace. No
other part of the file is touched.
"""

import logging

from attrs import field, frozen

from branchtree.check.report import CheckReport
from branchtree.config import BranchtreeConfig
from branchtree.core.tree_node import Specification
from branchtree.scaffold.emitter import ScaffoldEmitter
from branchtree.structure.declarations import ParsedContract, ParsedSource

logger = logging.getLogger(__name__)


@frozen
class FixResult:
    """
    Outcome of an autofix run.

    Params:
        text: The patched source
        inserted: Identifiers of the inserted declarations, in tree order
    """

    text: str
    inserted: tuple[str, ...] = field(default=(), converter=tuple)

    @property
    def changed(self) -> bool:
        return bool(self.inserted)


def _separator(text: str) -> str:
    """Blank-line separator needed before appending a new contract."""
    if not text or text.endswith("\n\n"):
        return ""
    if text.endswith("\n"):
        return "\n"
    return "\n\n"


def _insertion_points(
    order: list[str],
    patch: list[tuple[str, str]],
    contract: ParsedContract,
) -> dict[int, list[tuple[str, str]]]:
    """Group patch declarations by the offset they are spliced at."""
    points: dict[int, list[tuple[str, str]]] = {}
    position = {identifier: index for index, identifier in enumerate(order)}

    for identifier, text in patch:
        offset = contract.body_start
        for previous in reversed(order[: position[identifier]]):
            anchor = contract.find(previous)
            if anchor is not None:
                offset = anchor.end
                break
        points.setdefault(offset, []).append((identifier, text))
    return points


def apply_fixes(
    spec: Specification,
    source_text: str,
    source: ParsedSource,
    report: CheckReport,
    config: BranchtreeConfig | None = None,
) -> FixResult:
    """
    Insert the declarations reported as missing.

    Params:
        spec: The expected structure
        source_text: Current text of the test file
        source: Parsed declarations of that text
        report: Check report for the same specification and source
        config: Settings used to emit the declarations

    Returns:
        Patched text and the inserted identifiers; the input text unchanged
        when nothing is missing
    """
    emitter = ScaffoldEmitter(config)
    missing = report.missing_paths
    if not missing:
        return FixResult(text=source_text)

    contract = source.select(report.container)
    if contract is None:
        scaffold = emitter.render(spec)
        declaration = scaffold.text[scaffold.text.index("contract ") :]
        separator = _separator(source_text)
        logger.info("appending contract %s", report.container)
        return FixResult(
            text=source_text + separator + declaration,
            inserted=[d.name for d in scaffold.source.contracts[0].declarations] or [report.container],
        )

    resolved = emitter.resolve(spec)
    order = [node.identifier for node in resolved.walk()]
    patch = [
        (declaration.identifier, declaration.text)
        for declaration in emitter.emit_patch(spec, missing, contract.identifiers)
    ]
    if not patch:
        return FixResult(text=source_text)

    text = source_text
    for offset, entries in sorted(_insertion_points(order, patch, contract).items(), reverse=True):
        if offset == contract.body_start:
            joined = "\n\n".join(entry_text for _, entry_text in entries)
            if not source_text[contract.body_start : contract.body_end].strip():
                # Blank body: replace it so the closing brace stays on its own line
                text = text[:offset] + "\n" + joined + "\n" + text[contract.body_end :]
                continue
            snippet = "\n" + joined + "\n"
        else:
            snippet = "".join("\n\n" + entry_text for _, entry_text in entries)
        text = text[:offset] + snippet + text[offset:]

    inserted = [identifier for identifier, _ in patch]
    logger.info("inserted %d declarations into %s", len(inserted), contract.name)
    return FixResult(text=text, inserted=inserted)
