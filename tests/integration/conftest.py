"""Fixtures for integration tests."""

import sys
import textwrap
from pathlib import Path
from typing import Protocol
from unittest.mock import Mock

import pytest

from mcpt.interpreters import Interpreter, InterpreterRegistry
from mcpt.reporting import Reporter


class WriteScriptFn(Protocol):
    """Protocol for test script creation function."""

    def __call__(self, name: str, body: str) -> Path:
        """Write a script and return its path."""


@pytest.fixture
def write_script(tmp_path: Path) -> WriteScriptFn:
    """Return a function that writes Python test scripts under tmp_path."""

    def _write(name: str, body: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(body))
        return path

    return _write


@pytest.fixture
def python_everywhere() -> InterpreterRegistry:
    """Registry running .py, .js and .ts files with the current Python.

    Lets scenario tests use realistic file names without needing Node.
    """
    interpreter = Interpreter(name="python", command=[sys.executable])
    return InterpreterRegistry({".py": interpreter, ".js": interpreter, ".ts": interpreter})


@pytest.fixture
def reporter_mock() -> Mock:
    """Create mock reporter."""
    return Mock(spec=Reporter)
