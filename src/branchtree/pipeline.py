"""
Per-file pipelines and batch execution.

Each tree file runs its own pipeline: parse, then emit, or extract and check.
Pipelines share no state, so a batch runs them on a thread pool and restores
input order afterwards. A failing file is recorded as a failed outcome and does
not stop the rest of the batch.
"""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from attrs import frozen

from branchtree.check.checker import ConsistencyChecker
from branchtree.check.fixer import FixResult, apply_fixes
from branchtree.check.report import CheckReport
from branchtree.config import BranchtreeConfig
from branchtree.exceptions import BranchtreeError
from branchtree.formatting import format_source
from branchtree.parsing.parser import parse_tree
from branchtree.scaffold.emitter import ScaffoldEmitter
from branchtree.structure.declarations import SourceParser

logger = logging.getLogger(__name__)


@frozen
class FileOutcome:
    """
    Result of one file's pipeline.

    Params:
        path: The tree file
        output: Generated source (scaffold runs)
        report: Check report (check runs)
        fix: Autofix result (check runs with fixing)
        error: The error that aborted this file's pipeline
    """

    path: Path
    output: str | None = None
    report: CheckReport | None = None
    fix: FixResult | None = None
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def scaffold_text(tree_text: str, config: BranchtreeConfig | None = None) -> str:
    """
    Generate a Solidity scaffold from tree text.

    Raises:
        TreeSyntaxError: When the tree text is malformed
        IdentifierError: When a title cannot become an identifier
    """
    config = config or BranchtreeConfig()
    emitted = ScaffoldEmitter(config).emit(parse_tree(tree_text))
    if config.format_output:
        return format_source(emitted)
    return emitted


def check_text(
    tree_text: str,
    source_text: str,
    parser: SourceParser,
    config: BranchtreeConfig | None = None,
    file: str | None = None,
) -> CheckReport:
    """
    Check existing source text against tree text.

    Raises:
        TreeSyntaxError: When the tree text is malformed
        ExternalParseError: When the source text cannot be parsed
    """
    spec = parse_tree(tree_text)
    return ConsistencyChecker(config).check_source(spec, parser.parse(source_text), file=file)


def fix_text(
    tree_text: str,
    source_text: str,
    parser: SourceParser,
    config: BranchtreeConfig | None = None,
    file: str | None = None,
) -> tuple[CheckReport, FixResult]:
    """
    Check source text and splice in the declarations it is missing.

    Returns:
        The report of the original text and the fix result
    """
    config = config or BranchtreeConfig()
    spec = parse_tree(tree_text)
    source = parser.parse(source_text)
    report = ConsistencyChecker(config).check_source(spec, source, file=file)
    fix = apply_fixes(spec, source_text, source, report, config)
    if fix.changed and config.format_output:
        fix = FixResult(text=format_source(fix.text), inserted=fix.inserted)
    return report, fix


def source_path_for(tree_path: Path, config: BranchtreeConfig) -> Path:
    """Return the test file paired with a tree file (`Foo.tree` -> `Foo.t.sol`)."""
    return tree_path.with_suffix(config.source_suffix)


def scaffold_file(tree_path: Path, config: BranchtreeConfig) -> FileOutcome:
    """Run the scaffold pipeline for one tree file."""
    text = tree_path.read_text(encoding="utf-8")
    return FileOutcome(path=tree_path, output=scaffold_text(text, config))


def check_file(tree_path: Path, config: BranchtreeConfig, parser: SourceParser, fix: bool = False) -> FileOutcome:
    """Run the check pipeline for one tree file and its paired test file."""
    tree_text = tree_path.read_text(encoding="utf-8")
    source_text = source_path_for(tree_path, config).read_text(encoding="utf-8")
    if fix:
        report, result = fix_text(tree_text, source_text, parser, config, file=str(tree_path))
        return FileOutcome(path=tree_path, report=report, fix=result)
    return FileOutcome(path=tree_path, report=check_text(tree_text, source_text, parser, config, file=str(tree_path)))


def _guarded(worker: Callable[[Path], FileOutcome], path: Path) -> FileOutcome:
    try:
        return worker(path)
    except (BranchtreeError, OSError) as e:
        logger.debug("pipeline for %s failed: %s", path, e)
        return FileOutcome(path=path, error=e)


def run_batch(
    paths: Sequence[Path],
    worker: Callable[[Path], FileOutcome],
    max_workers: int | None = None,
) -> list[FileOutcome]:
    """
    Run one pipeline per file concurrently.

    Params:
        paths: Tree files to process
        worker: Pipeline for a single file
        max_workers: Thread pool size (None for the executor default)

    Returns:
        One outcome per path, in input order
    """
    if not paths:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(_guarded, worker, path) for path in paths]
        return [future.result() for future in futures]
