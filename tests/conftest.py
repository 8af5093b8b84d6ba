"""Shared test fixtures for tasc.

Provides reusable fixtures for loading the sample API description, creating
isolated project directories, managing output and logging state, and running
CLI commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from tasc.models import Operation, TascConfig
from tasc.output import reset_output

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the ``tasc`` logger after every test.

    The OutputManager and the RichHandler installed by ``configure_logging``
    cache references to sys.stdout/sys.stderr at creation time. When Typer's
    CliRunner redirects those streams during a test and the test finishes,
    the cached references become stale ("I/O operation on closed file").
    """
    yield
    reset_output()
    logger = logging.getLogger("tasc")
    for handler in list(logger.handlers):
        if getattr(handler, "_tasc_handler", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Sample API description
# ---------------------------------------------------------------------------


@pytest.fixture
def users_spec_bytes() -> bytes:
    """Raw bytes of the sample users API description."""
    return (FIXTURES_DIR / "users_api.json").read_bytes()


@pytest.fixture
def users_spec(users_spec_bytes: bytes) -> dict[str, Any]:
    """Parsed sample users API description."""
    return json.loads(users_spec_bytes)


@pytest.fixture
def users_operations(users_spec: dict[str, Any]) -> list[Operation]:
    """Operation table extracted from the sample description."""
    from tasc.parser import extract_operations

    return extract_operations(users_spec)


# ---------------------------------------------------------------------------
# Isolated project directory
# ---------------------------------------------------------------------------


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test inside an empty project directory.

    The data directory points into *tmp_path* and every ``TASC_*`` override
    and colour variable is cleared, so the developer's environment cannot
    leak into the test.
    """
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ("TASC_API_DOC_URL", "TASC_POLL_INTERVAL_MS", "TASC_LOG_LEVEL", "API_URL"):
        monkeypatch.delenv(var, raising=False)
    return project


@pytest.fixture
def sample_config() -> TascConfig:
    """A config pointing at a fake API host."""
    return TascConfig(api_doc_url="https://api.example.com/doc/openapi.json")


@pytest.fixture
def write_config(project_dir: Path):
    """Factory that writes ``tasc.json`` into the project directory."""

    def _write(data: dict[str, Any]) -> Path:
        path = project_dir / "tasc.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Create a Typer CliRunner for invoking CLI commands in tests."""
    from typer.testing import CliRunner

    return CliRunner()
