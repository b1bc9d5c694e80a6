"""Shared test fixtures for discogen.

Provides reusable fixtures for loading discovery document fixtures,
building generation passes, creating isolated config environments,
managing output state, and running CLI commands. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import copy
import importlib.util
import json
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Callable

import pytest

from discogen.generator.api import API
from discogen.models import DiscoveryDocument
from discogen.output import LOGGER_NAME, OutputFormat, OutputManager, reset_output, set_output
from discogen.parser.document import parse_document


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.  The Rich log handler bound to those
    streams is removed for the same reason.
    """
    yield
    reset_output()
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Discovery document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tasks_raw() -> dict[str, Any]:
    """Load the raw tasks:v1 discovery document."""
    with open(FIXTURES_DIR / "tasks_v1.json") as f:
        return json.load(f)


@pytest.fixture
def tasks_path() -> Path:
    return FIXTURES_DIR / "tasks_v1.json"


@pytest.fixture
def directory_raw() -> dict[str, Any]:
    with open(FIXTURES_DIR / "directory.json") as f:
        return json.load(f)


@pytest.fixture
def tasks_document(tasks_raw: dict[str, Any]) -> DiscoveryDocument:
    return parse_document(tasks_raw)


@pytest.fixture
def tasks_api(tasks_document: DiscoveryDocument) -> API:
    """A fully built generation pass over tasks:v1."""
    return API(tasks_document).build()


def minimal_document(**overrides: Any) -> dict[str, Any]:
    """Return a small raw document; keyword arguments replace top-level keys."""
    doc: dict[str, Any] = {
        "id": "demo:v1",
        "name": "demo",
        "version": "v1",
        "title": "Demo API",
        "rootUrl": "https://demo.example.com/",
        "servicePath": "demo/v1/",
        "schemas": {},
        "resources": {},
    }
    doc.update(copy.deepcopy(overrides))
    return doc


@pytest.fixture
def make_document() -> Callable[..., dict[str, Any]]:
    """Factory for small raw documents; see :func:`minimal_document`."""
    return minimal_document


@pytest.fixture
def make_api() -> Callable[..., API]:
    """Factory building an (unbuilt) :class:`API` from document overrides."""

    def _make(**overrides: Any) -> API:
        return API(parse_document(minimal_document(**overrides)))

    return _make


# ---------------------------------------------------------------------------
# Generated module loading
# ---------------------------------------------------------------------------


@pytest.fixture
def load_module() -> Callable[[Path, str], ModuleType]:
    """Import a generated module from a file path.

    The module is registered in ``sys.modules`` for the duration of the test
    so pydantic can resolve forward references against it.
    """
    loaded: list[str] = []

    def _load(path: Path, name: str) -> ModuleType:
        spec = importlib.util.spec_from_file_location(name, path)
        assert spec is not None and spec.loader is not None
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        loaded.append(name)
        spec.loader.exec_module(module)
        return module

    yield _load
    for name in loaded:
        sys.modules.pop(name, None)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all DISCOGEN_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "DISCOGEN_GENDIR",
        "DISCOGEN_DIRECTORY_URL",
        "DISCOGEN_NO_CACHE",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
