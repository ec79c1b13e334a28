"""Core CLI application and shared utilities."""

from __future__ import annotations

from typing import List, Optional

import typer
from click import get_current_context
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from ..config import Settings, load_settings
from ..errors import InvalidPolicyError
from ..generations import RetentionPolicy, parse_generations
from ..logger import configure_logging, get_logger, level_for_verbosity

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)
log = get_logger(__name__)

USAGE_ERROR = 2


@app.callback()
def main(
    ctx: typer.Context,
    config: str = typer.Option(None, "--config", "-c", help="Path to lifespan.yaml"),
    log_level: str = typer.Option(None, "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
    log_json: bool = typer.Option(False, "--log-json", help="Emit logs as JSON lines on stderr"),
) -> None:
    """Backup Lifespan - expire backups under a grandfather-father-son policy."""
    ctx.obj = {"config": config, "log_level": log_level, "log_json": log_json}


def setup_logging(ctx: typer.Context | None, verbose: int) -> None:
    """Configure logging from --log-level, falling back to -v occurrences."""
    context = ctx or get_current_context(silent=True)
    obj = (context.obj if context else None) or {}
    level = obj.get("log_level") or level_for_verbosity(verbose)
    configure_logging(level=level, json_output=bool(obj.get("log_json")))


def get_config_path(ctx: typer.Context | None = None) -> str | None:
    """Get config path from context."""
    context = ctx or get_current_context(silent=True)
    return context.obj.get("config") if context and context.obj else None


def fail(message: str, code: int = 1) -> typer.Exit:
    log.error(message)
    err_console.print(f"[red]Error: {escape(message)}[/red]", highlight=False)
    return typer.Exit(code)


def load_cli_settings(ctx: typer.Context) -> Settings:
    try:
        return load_settings(get_config_path(ctx))
    except (OSError, ValidationError, ValueError) as e:
        raise fail(f"invalid configuration: {e}", USAGE_ERROR)


def resolve_policy(generations: Optional[List[str]], settings: Settings) -> RetentionPolicy:
    """Generation arguments win over configured generations; at least one is required."""
    tokens = list(generations or []) or list(settings.retention.generations)
    if not tokens:
        raise fail(
            "no generations given: pass e.g. '31D 10W 12M' or set retention.generations in the config",
            USAGE_ERROR,
        )
    try:
        return parse_generations(tokens)
    except InvalidPolicyError as e:
        raise fail(str(e), USAGE_ERROR)
