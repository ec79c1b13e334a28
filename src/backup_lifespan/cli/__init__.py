"""CLI commands for backup-lifespan."""

# These imports register CLI commands with the app via decorators
from . import expire_commands  # noqa: F401
from .core import app


def main() -> None:
    """Console entry point for the lifespan CLI."""
    app()


__all__ = ["app", "main"]
