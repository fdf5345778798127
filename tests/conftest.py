"""Pytest fixtures for cronguard tests."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from cronguard.core.logging import clear_context


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset logging state before and after each test.

    This ensures test isolation for logging configuration.
    """
    structlog.reset_defaults()
    clear_context()

    # Clear all handlers from root logger
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)

    structlog.reset_defaults()
    clear_context()


class FakeSleep:
    """Awaitable sleep stand-in that records requested durations."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def fake_sleep() -> FakeSleep:
    """Sleep replacement that returns immediately."""
    return FakeSleep()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Controllable clock for ExecutionLogger."""
    return FakeClock()


@pytest.fixture
def sample_config_dict() -> dict:
    """Return a sample job configuration dictionary."""
    return {
        "name": "news-batch",
        "batch_type": "news",
        "retry": {
            "max_retries": 2,
            "base_delay_ms": 500,
            "max_delay_ms": 5000,
        },
        "logging": {
            "level": "DEBUG",
            "format": "console",
        },
    }


@pytest.fixture
def sample_yaml_config(tmp_path: Path, sample_config_dict: dict) -> Path:
    """Create a sample YAML config file."""
    import yaml

    config_path = tmp_path / "job.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config_dict, f)
    return config_path
