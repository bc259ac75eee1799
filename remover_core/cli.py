"""cond-remover command line: clean C# sources of a target preprocessor symbol."""

import sys
from dataclasses import replace
from pathlib import Path

import click

from remover_core.analysis.conditional_analyzer import ConditionalAnalyzer
from remover_core.config import (
    DEFAULT_TARGET_SYMBOL,
    ProcessingOptions,
    apply_config,
    load_config,
)
from remover_core.core.preprocess import scan_source
from remover_core.remover import discover_files, process_files
from remover_core.utils import console
from remover_core.utils.bom import read_with_bom
from remover_core.utils.exit_codes import ExitCodes
from remover_core.utils.log import get_logger
from remover_core.utils.report import write_report

logger = get_logger("cli")


def build_options(path, dry_run=False, verbose=False, include_generated=False, backup=False,
                  parallel=False, report=None, target=None, define=(), fail_on_review=False):
    """Project config from pyproject.toml first, explicit flags on top."""
    options = apply_config(ProcessingOptions(), load_config(Path(path)))
    changes = {
        "dry_run": dry_run,
        "verbose": verbose,
        "parallel": parallel,
        "report_path": report,
        "fail_on_review": fail_on_review,
    }
    if include_generated:
        changes["include_generated"] = True
    if backup:
        changes["create_backup"] = True
    if target:
        changes["target_symbol"] = target
    if define:
        changes["additional_defines"] = tuple(define)
    return replace(options, **changes)


@click.group()
def cli():
    """Remove a target preprocessor conditional (default NET8_0_OR_GREATER) from C# files."""


@cli.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--dry-run", is_flag=True, help="Preview changes without modifying files")
@click.option("--verbose", is_flag=True, help="Show detailed output")
@click.option("--include-generated", is_flag=True,
              help="Process generated files (*.g.cs, *.Designer.cs, etc.)")
@click.option("--backup", is_flag=True, help="Create .bak files before modifying (recommended)")
@click.option("--parallel", is_flag=True, help="Process files in parallel (faster for large codebases)")
@click.option("--report", type=click.Path(dir_okay=False), default=None,
              help="Write JSON report to specified path")
@click.option("--target", default=None,
              help=f"Symbol to target for removal (default: {DEFAULT_TARGET_SYMBOL})")
@click.option("--define", multiple=True,
              help="Additional preprocessor symbol defined during parsing (repeatable)")
@click.option("--fail-on-review", is_flag=True,
              help="Exit with code 2 if any blocks need manual review (CI gate)")
def clean(path, dry_run, verbose, include_generated, backup, parallel, report, target, define,
          fail_on_review):
    """Remove the target conditional from PATH (a .cs file or a directory)."""
    options = build_options(path, dry_run, verbose, include_generated, backup, parallel,
                            report, target, define, fail_on_review)
    logger.info(f"clean {path} target={options.target_symbol} defines={options.additional_defines}")

    files = discover_files(path, options.include_generated)
    click.echo(f"Found {len(files)} files to process")
    if options.dry_run:
        click.echo("(dry-run mode - no files will be modified)")
    if options.create_backup:
        click.echo("(backup mode - .bak files will be created)")
    click.echo()

    def on_result(result):
        if options.verbose:
            click.echo(f"Processing: {result.file_path}")
        console.print_result(result, options.verbose)

    results = process_files(files, options, on_result=on_result)
    console.print_summary(results)

    if options.report_path is not None:
        write_report(options.report_path, results)
        click.echo(f"\nReport written to: {options.report_path}")

    code = ExitCodes.for_run(results, options.fail_on_review)
    if code == ExitCodes.REVIEW_REQUIRED:
        click.echo()
        click.echo("Error: --fail-on-review: Exiting with code 2 (manual review required)")
    logger.info(f"clean finished with exit code {code}: {ExitCodes.get_description(code)}")
    sys.exit(code)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--target", default=None,
              help=f"Symbol to target for removal (default: {DEFAULT_TARGET_SYMBOL})")
@click.option("--define", multiple=True,
              help="Additional preprocessor symbol defined during parsing (repeatable)")
def scan(file, target, define):
    """List the directives of FILE and how each target block would be handled."""
    options = build_options(file, target=target, define=define)
    content, _ = read_with_bom(file)
    result = scan_source(content, options.preprocessor_symbols)
    console.print_directives(result.directives)

    analysis = ConditionalAnalyzer(options.target_symbols_with_aliases).analyze(result)
    click.echo(f"\n{len(analysis.blocks)} block(s) for {options.target_symbol}")
    for block in analysis.blocks:
        click.echo(f"  line {block.line}: {block.complexity.value}  {block.if_directive.text}")
    for issue in analysis.issues:
        click.echo(f"  -> {issue.message} at line {issue.line}")


if __name__ == "__main__":
    cli()
