"""Terminal output for the command line: per-file lines, summary, directive table."""

import click

from remover_core.config import REVIEW_SENTINEL
from remover_core.results import ResultStatus

RESET   = "\033[0m"
CYAN    = "\033[96m"
YELLOW  = "\033[93m"
GREEN   = "\033[92m"
MAGENTA = "\033[95m"
RED     = "\033[91m"
DIM     = "\033[2m"


def print_result(result, verbose=False):
    status = result.status
    if status is ResultStatus.SUCCESS:
        click.echo(f"  {GREEN}OK{RESET} {result.file_path} ({result.blocks_removed} cleaned)")
    elif status is ResultStatus.SUCCESS_WITH_REVIEW:
        click.echo(
            f"  {YELLOW}REVIEW{RESET} {result.file_path} ({result.blocks_removed} cleaned, "
            f"{result.blocks_flagged_for_review} need review)"
        )
        if verbose:
            for issue in result.issues:
                click.echo(f"    -> {issue.message} at line {issue.line}")
    elif status is ResultStatus.FAILED:
        click.echo(f"  {RED}FAIL{RESET} {result.file_path}")
        for error in result.errors:
            click.echo(f"    {error}")
    elif status is ResultStatus.SKIPPED and verbose:
        click.echo(f"  {DIM}SKIP {result.file_path}{RESET}")


def print_summary(results):
    removed = sum(r.blocks_removed for r in results)
    flagged = sum(r.blocks_flagged_for_review for r in results)
    failed = sum(1 for r in results if r.is_failed)

    click.echo()
    click.echo("=" * 55)
    click.echo(f"  Files processed:     {len(results)}")
    click.echo(f"  Blocks cleaned:      {removed}")
    click.echo(f"  Blocks need review:  {flagged} (#error injected)")
    click.echo(f"  Files failed:        {failed}")
    click.echo("=" * 55)

    if flagged > 0:
        click.echo()
        click.echo(f"{YELLOW}Warning: {flagged} complex blocks have #error directives injected.{RESET}")
        click.echo("  Build will fail until these are manually reviewed and resolved.")
        click.echo()
        click.echo(f"  To find them: grep -rn '{REVIEW_SENTINEL}' --include='*.cs'")


def format_flag(flag):
    return GREEN + "yes" + RESET if flag else DIM + "no" + RESET


def print_directives(directives):
    """Aligned table of located directives."""
    click.echo("\n" + CYAN + "=== DIRECTIVES ===" + RESET + "\n")

    header = f"{YELLOW}LINE KIND    LIVE  TEXT{RESET}"
    click.echo(header)
    click.echo(DIM + "-" * 70 + RESET)

    for d in directives:
        line = f"{d.line}".rjust(4)
        kind = (CYAN + d.kind.value + RESET).ljust(16)
        click.echo(f"{line} {kind} {format_flag(d.active)}  {MAGENTA}{d.text}{RESET}")
