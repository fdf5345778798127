"""Rich output helpers for the cronguard CLI."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from cronguard.core.config import RetryConfig
from cronguard.execution.execution_logger import format_duration
from cronguard.execution.retry import calculate_delay

console = Console()
err_console = Console(stderr=True)


def backoff_table(config: RetryConfig) -> Table:
    """Build a table of the delay that follows each failed attempt."""
    table = Table(title="Retry schedule")
    table.add_column("Attempt", justify="right")
    table.add_column("Delay (ms)", justify="right")
    table.add_column("Delay", justify="right")

    for attempt in range(1, config.max_retries + 1):
        delay_ms = calculate_delay(config, attempt)
        table.add_row(str(attempt), str(delay_ms), format_duration(delay_ms))
    return table
