"""Interpreters that launch test files, keyed by file extension."""

from mcpt.interpreters.base import Interpreter
from mcpt.interpreters.loading import (
    InterpreterNotFoundError,
    InterpreterRegistry,
    load_interpreter_plugins,
)

__all__ = [
    "Interpreter",
    "InterpreterNotFoundError",
    "InterpreterRegistry",
    "load_interpreter_plugins",
]
