"""Pytest configuration and shared fixtures."""

import os
import tempfile
import time
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest


@pytest.fixture
def config_dir() -> Iterator[Path]:
    """Temporary directory for config files."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def write_config() -> Callable[[Path, str], Path]:
    """Write text to a config file and push its mtime forward.

    Bumping the mtime keeps change detection reliable on filesystems
    with coarse timestamps.
    """

    def _write(path: Path, content: str) -> Path:
        previous = path.stat().st_mtime_ns if path.exists() else None
        path.write_text(content, encoding="utf-8")
        if previous is not None:
            bumped = max(path.stat().st_mtime_ns, previous + 1_000_000_000)
            os.utime(path, ns=(bumped, bumped))
        return path

    return _write


@pytest.fixture
def sample_json_config() -> str:
    """Sample JSON config overriding one key."""
    return '{"list": ["1", "2"]}'


@pytest.fixture
def sample_yaml_config() -> str:
    """Sample YAML config."""
    return 'port: 8888\ncert: ""\n'


@pytest.fixture
def wait_until() -> Callable[..., bool]:
    """Poll a predicate until it holds or the timeout expires."""

    def _wait(predicate: Callable[[], bool], timeout: float = 3.0, interval: float = 0.01) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait
