"""cronguard CLI.

Commands:
    backoff   Print the retry delay schedule for a set of retry settings
    validate  Check a YAML job configuration file
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich.markup import escape

from cronguard import __version__
from cronguard.core.config import JobConfig, RetryConfig
from cronguard.core.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_DELAY_MS,
    DEFAULT_MAX_RETRIES,
)

from .output import backoff_table, console, err_console

app = typer.Typer(
    name="cronguard",
    help="Retry and timeout tooling for scheduled batch jobs",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"cronguard v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """cronguard: bounded retry, timeout warnings and step ledgers for batch jobs."""


@app.command()
def backoff(
    max_retries: Annotated[
        int, typer.Option("--max-retries", "-r", help="Retries after the first attempt")
    ] = DEFAULT_MAX_RETRIES,
    base_delay_ms: Annotated[
        int, typer.Option("--base-delay", "-b", help="Delay before the first retry (ms)")
    ] = DEFAULT_BASE_DELAY_MS,
    max_delay_ms: Annotated[
        int, typer.Option("--max-delay", "-m", help="Cap for any single delay (ms)")
    ] = DEFAULT_MAX_DELAY_MS,
) -> None:
    """Show the delay that follows each failed attempt."""
    try:
        config = RetryConfig(
            max_retries=max_retries,
            base_delay_ms=base_delay_ms,
            max_delay_ms=max_delay_ms,
        )
    except ValidationError as e:
        err_console.print(f"[red]Invalid retry settings:[/red] {e}")
        raise typer.Exit(1) from None

    if config.max_retries == 0:
        console.print("No retries: the job runs exactly once.")
        return
    console.print(backoff_table(config))


@app.command()
def validate(
    config_file: Annotated[
        Path,
        typer.Argument(help="Path to a YAML job configuration"),
    ],
) -> None:
    """Validate a job configuration file.

    Exit codes: 0 valid, 1 invalid content, 2 file missing, unreadable or not YAML.
    """
    if not config_file.exists():
        err_console.print(f"[red]File not found:[/red] {config_file}")
        raise typer.Exit(2)

    try:
        config = JobConfig.from_yaml(config_file)
    except yaml.YAMLError as e:
        err_console.print(f"[red]YAML syntax error:[/red] {e}")
        raise typer.Exit(2) from None
    except (OSError, UnicodeDecodeError) as e:
        err_console.print(f"[red]Cannot read config:[/red] {escape(str(e))}")
        raise typer.Exit(2) from None
    except ValidationError as e:
        err_console.print("[red]Configuration is invalid:[/red]")
        for error in e.errors():
            loc = ".".join(str(part) for part in error["loc"]) or "<root>"
            err_console.print(f"  {loc}: {error['msg']}")
        raise typer.Exit(1) from None

    console.print(f"[green]✓[/green] {config.name} ({config.batch_type})")
    console.print(
        f"  retries: {config.retry.max_retries}, "
        f"delay: {config.retry.base_delay_ms}-{config.retry.max_delay_ms}ms"
    )
    console.print(f"  logging: {config.logging.level} / {config.logging.format}")


__all__ = ["app", "main", "backoff", "validate"]
