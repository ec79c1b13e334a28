"""Retention commands: expire, plan and check."""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..errors import LifespanError
from ..generations import RetentionPolicy, format_generation
from ..models import Backup
from ..report import Decision, render_table, summary_line
from ..retain import decide, explain
from ..tarsnap import delete_archives, list_archives, parse_archives
from .core import app, console, fail, load_cli_settings, resolve_policy, setup_logging

GENERATIONS_HELP = "Generations to keep: <number><H|D|W|M|Y> ..."


def _report(
    backups: List[Backup],
    policy: RetentionPolicy,
    decision: Decision,
    verbose: int,
    as_json: bool,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    if as_json:
        payload: Dict[str, Any] = {
            "policy": [format_generation(g) for g in policy],
            **decision.to_dict(),
        }
        payload.update(extra or {})
        typer.echo(json.dumps(payload, indent=2))
        return
    if verbose:
        console.print(render_table(decision, explain(backups, policy)))
    else:
        console.print(summary_line(decision), highlight=False)


@app.command()
def expire(
    ctx: typer.Context,
    generations: Optional[List[str]] = typer.Argument(None, help=GENERATIONS_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Don't actually delete anything"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Show verbose output (-vv for more)"),
    as_json: bool = typer.Option(False, "--json", help="Output the decision as JSON"),
    keep_latest: Optional[bool] = typer.Option(
        None, "--keep-latest/--no-keep-latest", help="Always keep the newest archive"
    ),
) -> None:
    """List tarsnap archives and delete those no generation keeps."""
    setup_logging(ctx, verbose)
    settings = load_cli_settings(ctx)
    policy = resolve_policy(generations, settings)
    protect_latest = settings.retention.keep_latest if keep_latest is None else keep_latest
    dry = dry_run or settings.tarsnap.dry_run

    try:
        backups = parse_archives(list_archives(settings.tarsnap.binary, settings.tarsnap.extra_args))
        decision = decide(backups, policy, keep_latest=protect_latest)
        deleted = delete_archives(
            [b.name for b in decision.expired],
            binary=settings.tarsnap.binary,
            dry_run=dry,
            extra_args=settings.tarsnap.extra_args,
        )
    except LifespanError as e:
        raise fail(str(e))

    _report(backups, policy, decision, verbose, as_json, {"dry_run": dry, "deleted": [] if dry else deleted})
    if not as_json and deleted:
        verb = "Would delete" if dry else "Deleted"
        console.print(f"{verb}: {escape(', '.join(deleted))}", highlight=False)


@app.command()
def plan(
    ctx: typer.Context,
    generations: Optional[List[str]] = typer.Argument(None, help=GENERATIONS_HELP),
    input_path: str = typer.Option(
        "-", "--input", "-i", help="Archive listing in 'tarsnap --list-archives -v' format ('-' for stdin)"
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Show verbose log output (-vv for more)"),
    as_json: bool = typer.Option(False, "--json", help="Output the decision as JSON"),
    keep_latest: Optional[bool] = typer.Option(
        None, "--keep-latest/--no-keep-latest", help="Always keep the newest archive"
    ),
) -> None:
    """Decide retention for a saved archive listing without deleting anything."""
    setup_logging(ctx, verbose)
    settings = load_cli_settings(ctx)
    policy = resolve_policy(generations, settings)
    protect_latest = settings.retention.keep_latest if keep_latest is None else keep_latest

    try:
        if input_path == "-":
            text = sys.stdin.read()
        else:
            with open(input_path, "r", encoding="utf-8") as f:
                text = f.read()
    except OSError as e:
        raise fail(f"cannot read listing: {e}")

    try:
        backups = parse_archives(text)
        decision = decide(backups, policy, keep_latest=protect_latest)
    except LifespanError as e:
        raise fail(str(e))

    _report(backups, policy, decision, max(verbose, 1), as_json)


@app.command()
def check(
    ctx: typer.Context,
    generations: Optional[List[str]] = typer.Argument(None, help=GENERATIONS_HELP),
) -> None:
    """Validate generation arguments and show the parsed policy."""
    setup_logging(ctx, 0)
    settings = load_cli_settings(ctx)
    policy = resolve_policy(generations, settings)

    table = Table(title="Retention policy")
    table.add_column("Generation", style="cyan")
    table.add_column("Keep", justify="right")
    table.add_column("Interval", style="green")
    for g in policy:
        table.add_row(format_generation(g), str(g.retain_count), g.interval.label)
    console.print(table)
