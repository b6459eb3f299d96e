"""
Command-line interface.

`branchtree scaffold` generates Solidity test skeletons from tree files;
`branchtree check` verifies existing test files against their trees and can
insert the declarations they are missing.
"""

import glob
import logging
from pathlib import Path
from typing import List, Optional

import typer

from branchtree.check.report import CheckReport, MismatchKind, Severity
from branchtree.config import BranchtreeConfig, load_config
from branchtree.exceptions import ConfigurationError
from branchtree.pipeline import (
    FileOutcome,
    check_file,
    run_batch,
    scaffold_file,
    source_path_for,
)
from branchtree.structure.solc import DEFAULT_SOLC, SolcParser

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    help="Generate and check Solidity tests from branching tree specifications.",
)

_GLOB_CHARS = ("*", "?", "[")


def expand_paths(patterns: list[str]) -> list[Path]:
    """
    Expand glob patterns, keeping plain paths as given.

    Params:
        patterns: File paths or glob patterns

    Returns:
        Paths in argument order; matches of one pattern are sorted
    """
    paths: list[Path] = []
    for pattern in patterns:
        if any(char in pattern for char in _GLOB_CHARS):
            matches = sorted(glob.glob(pattern, recursive=True))
            if not matches:
                logger.warning("pattern '%s' matched no files", pattern)
            paths.extend(Path(match) for match in matches)
        else:
            paths.append(Path(pattern))
    return paths


def _config(ctx: typer.Context) -> BranchtreeConfig:
    return ctx.obj if isinstance(ctx.obj, BranchtreeConfig) else BranchtreeConfig()


def _report_failure(outcome: FileOutcome) -> None:
    typer.secho(f"error: {outcome.error}", fg=typer.colors.RED, err=True)
    typer.echo(f"file: {outcome.path}", err=True)


def _print_report(report: CheckReport, path: Path) -> None:
    if not report.mismatches:
        return
    typer.echo(f"{path}: {len(report.errors)} error(s), {len(report.warnings)} warning(s)")
    for mismatch in report.mismatches:
        color = typer.colors.RED if mismatch.severity is Severity.ERROR else typer.colors.YELLOW
        label = typer.style(f"{mismatch.severity.value:<7}", fg=color)
        where = mismatch.path_text or report.container
        typer.echo(f"  {label} [{mismatch.kind.value}] {where}: {mismatch.message}")


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Configuration file to load."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline details."),
) -> None:
    """Generate and check Solidity tests from branching tree specifications."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    try:
        ctx.obj = load_config(config_path=config)
    except ConfigurationError as e:
        raise typer.BadParameter(str(e), param_hint="--config") from e


@app.command()
def scaffold(
    ctx: typer.Context,
    files: List[str] = typer.Argument(..., help="Tree files or glob patterns."),
    write_files: bool = typer.Option(False, "--write-files", "-w", help="Write `.t.sol` files instead of printing."),
    force_write: bool = typer.Option(False, "--force-write", "-f", help="Overwrite existing `.t.sol` files."),
    solidity_version: Optional[str] = typer.Option(None, "--solidity-version", "-s", help="Pragma version."),
    vm_skip: Optional[bool] = typer.Option(None, "--vm-skip/--no-vm-skip", "-S", help="Emit `vm.skip(true);`."),
    format_output: Optional[bool] = typer.Option(None, "--format/--no-format", help="Format with `forge fmt`."),
) -> None:
    """Generate Solidity test skeletons from tree files."""
    config = _config(ctx).with_overrides(
        solidity_version=solidity_version,
        emit_vm_skip=vm_skip,
        format_output=format_output,
    )
    if force_write and not write_files:
        raise typer.BadParameter("--force-write requires --write-files", param_hint="--force-write")

    outcomes = run_batch(
        expand_paths(files),
        lambda path: scaffold_file(path, config),
        max_workers=config.max_workers,
    )

    failures = 0
    for outcome in outcomes:
        if outcome.failed:
            failures += 1
            _report_failure(outcome)
            continue
        if not write_files:
            typer.echo(outcome.output, nl=False)
            continue
        target = source_path_for(outcome.path, config)
        if target.exists() and not force_write:
            logger.warning("skipped emitting %s: the file already exists", target)
            continue
        target.write_text(outcome.output, encoding="utf-8")

    if failures:
        typer.secho(
            f"Could not scaffold {failures} file(s).",
            fg=typer.colors.YELLOW,
            err=True,
        )
        raise typer.Exit(code=1)


@app.command()
def check(
    ctx: typer.Context,
    files: List[str] = typer.Argument(..., help="Tree files or glob patterns."),
    fix: bool = typer.Option(False, "--fix", help="Insert missing declarations into the test files."),
    stdout: bool = typer.Option(False, "--stdout", help="With --fix, print patched files instead of writing."),
    strict: Optional[bool] = typer.Option(None, "--strict/--no-strict", help="Fail on warnings too."),
    solc: str = typer.Option(DEFAULT_SOLC, "--solc", help="solc binary used to parse test files."),
) -> None:
    """Check test files against their tree files."""
    config = _config(ctx).with_overrides(strict=strict)
    parser = SolcParser(solc)

    def worker(path: Path) -> FileOutcome:
        return check_file(path, config, parser.for_file(str(source_path_for(path, config))), fix=fix)

    outcomes = run_batch(expand_paths(files), worker, max_workers=config.max_workers)

    failed = False
    for outcome in outcomes:
        if outcome.failed:
            failed = True
            _report_failure(outcome)
            continue

        _print_report(outcome.report, outcome.path)
        if outcome.fix is not None and outcome.fix.changed:
            if stdout:
                typer.echo(outcome.fix.text, nl=False)
            else:
                source_path_for(outcome.path, config).write_text(outcome.fix.text, encoding="utf-8")
                typer.echo(f"{outcome.path}: inserted {len(outcome.fix.inserted)} declaration(s)")
            remaining = [m for m in outcome.report.mismatches if m.kind is not MismatchKind.MISSING]
            failed = failed or any(m.severity is Severity.ERROR for m in remaining)
            failed = failed or (config.strict and bool(remaining))
        else:
            failed = failed or not outcome.report.passed(strict=config.strict)

    if failed:
        raise typer.Exit(code=1)
    typer.secho("All files are consistent with their trees.", fg=typer.colors.GREEN)
