from __future__ import annotations

import socket
import sys
from pathlib import Path

import pytest
from hypothesis import settings
from hypothesis.database import DirectoryBasedExampleDatabase

from entrygate.config import DEFAULT_INTERPRETER_KEY, HarnessConfig, Interpreter
from entrygate.core.context import RunContext

_ALLOWED_MARKERS = {"unit", "integration", "slow"}

_ROOT = Path(__file__).resolve().parents[3]
_HYPOTHESIS_DB = _ROOT / "artifacts/entrygate/.hypothesis/examples"
_HYPOTHESIS_DB.parent.mkdir(parents=True, exist_ok=True)
settings.register_profile("entrygate", database=DirectoryBasedExampleDatabase(_HYPOTHESIS_DB))
settings.load_profile("entrygate")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network(monkeypatch: pytest.MonkeyPatch) -> None:
    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)


@pytest.fixture
def entries_root(tmp_path: Path) -> Path:
    root = tmp_path / "entries"
    root.mkdir()
    return root


@pytest.fixture
def ctx(tmp_path: Path) -> RunContext:
    return RunContext.from_args("pytest-run", str(tmp_path), quiet=True)


@pytest.fixture
def python_config(entries_root: Path) -> HarnessConfig:
    """Config that runs every entry file with the current Python interpreter."""
    python = Interpreter((sys.executable,))
    return HarnessConfig(
        entries_root=entries_root,
        expected_count=5,
        interpreters={DEFAULT_INTERPRETER_KEY: python, ".ts": python, ".coffee": python},
    )
