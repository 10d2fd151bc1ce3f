# schemasplit/cli.py
"""
schemasplit CLI -- Click commands with a rich terminal summary.

Provides the ``schemasplit`` console entry-point declared in pyproject.toml as
``schemasplit.cli:cli``.

- split:   split every consolidated contract schema under a workspace tree
- config:  show the effective configuration

Stdout carries only the list of written files, one path per line, so build
scripts can pipe it; everything decorative goes to stderr.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.padding import Padding

from . import __version__
from . import cli_theme as theme
from .config import get_config

console = Console(stderr=True)


def _print_version(
    ctx: click.Context,
    _param: click.Parameter,
    value: bool,
) -> None:
    if not value or ctx.resilient_parsing:
        return
    theme.print_version(__version__, Console())
    ctx.exit()


def _setup_logging(verbose: bool) -> None:
    from .utils.logging import setup_logging

    cfg = get_config()
    # SCHEMASPLIT_LOG_DIR wins over the home_dir-derived location.
    log_dir = None if os.getenv("SCHEMASPLIT_LOG_DIR") else cfg.log_dir
    setup_logging(
        level="DEBUG" if verbose else cfg.log_level,
        log_dir=log_dir,
        console_output=verbose,
    )


# ---------------------------------------------------------------------------
# Main CLI group
# ---------------------------------------------------------------------------


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log DEBUG messages to stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """schemasplit -- split consolidated contract schemas into per-message files."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return
    _setup_logging(verbose)


# ---------------------------------------------------------------------------
# split
# ---------------------------------------------------------------------------


@cli.command()
@click.argument(
    "root",
    required=False,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None,
              help="Files split in parallel (default from config, 1).")
@click.option("--exclude", "-x", "exclude", multiple=True,
              help="Directory-name substring to skip; repeatable. Replaces the defaults.")
@click.option("--dry-run", is_flag=True, help="List the files that would be written; change nothing.")
@click.option("--quiet", "-q", is_flag=True, help="Only print written file paths.")
def split(
    root: Optional[Path],
    workers: Optional[int],
    exclude: tuple[str, ...],
    dry_run: bool,
    quiet: bool,
) -> None:
    """Split consolidated schema JSON files found under ROOT.

    ROOT defaults to SCHEMASPLIT_ROOT_DIR, or the directory one level above
    the installed package.
    """
    from .batch import split_tree
    from .splitter import SplitWriteError

    cfg = get_config()
    root_dir = root if root is not None else cfg.effective_root
    excluded = exclude if exclude else tuple(cfg.excluded_dirs)
    effective_workers = workers if workers is not None else cfg.workers

    if not quiet:
        theme.section("Schema Split", console, "01")
        t = theme.make_kv_table()
        t.add_row("Root", str(root_dir))
        t.add_row("Excluded", ", ".join(excluded) or "-")
        t.add_row("Workers", str(effective_workers))
        t.add_row("Dry run", theme.badge("Yes", "warn") if dry_run else "No")
        console.print(Padding(t, (0, 0, 0, 2)))

    try:
        summary = split_tree(
            root_dir=root_dir,
            workers=effective_workers,
            excluded=excluded,
            dry_run=dry_run,
            on_emit=lambda path: click.echo(str(path)),
        )
    except SplitWriteError as exc:
        raise click.ClickException(f"Split aborted at {exc.path}: {exc.reason}")

    if quiet:
        return

    verb = "would be written" if dry_run else "written"
    console.print(theme.ok(
        f"{summary['split']} document(s) split -- {summary['written']} file(s) {verb}"
    ))
    console.print(theme.info(
        f"{summary['scanned']} JSON file(s) scanned, {summary['skipped']} skipped"
    ))
    if summary["collisions"]:
        console.print(theme.warn(
            f"{summary['collisions']} output path(s) written more than once; last write wins"
        ))


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.command("config")
def show_config() -> None:
    """Show the effective configuration."""
    cfg = get_config()
    theme.section("Configuration", console, "01")
    t = theme.make_kv_table()
    t.add_row("Root", str(cfg.effective_root))
    t.add_row("Excluded", ", ".join(cfg.excluded_dirs))
    t.add_row("Workers", str(cfg.workers))
    t.add_row("Log level", cfg.log_level)
    t.add_row("Log dir", str(cfg.log_dir))
    console.print(Padding(t, (0, 0, 0, 2)))


if __name__ == "__main__":
    cli()
