"""Interpreter registry and loading of interpreter plugins from entry points."""

import logging
from collections.abc import Mapping, Sequence
from importlib.metadata import entry_points
from pathlib import Path

from mcpt.interpreters.base import Interpreter
from mcpt.interpreters.builtin import BUILTIN_INTERPRETERS

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "mcpt.interpreters"


class InterpreterNotFoundError(Exception):
    """Raised when no interpreter is registered for a file extension."""


class InterpreterRegistry:
    """Mapping from file extension to the interpreter that runs it.

    Extensions are matched case-insensitively and include the leading dot.
    """

    def __init__(self, interpreters: Mapping[str, Interpreter] | None = None) -> None:
        self._by_extension: dict[str, Interpreter] = {}
        for extension, interpreter in (interpreters or {}).items():
            self.register(extension, interpreter)

    @classmethod
    def default(cls) -> "InterpreterRegistry":
        """Registry with the built-in interpreters plus installed plugins."""
        registry = cls(BUILTIN_INTERPRETERS)
        for extension, interpreter in load_interpreter_plugins().items():
            registry.register(extension, interpreter)
        return registry

    @property
    def extensions(self) -> Sequence[str]:
        return sorted(self._by_extension)

    def register(self, extension: str, interpreter: Interpreter) -> None:
        """Add or replace the interpreter for ``extension`` (e.g. ``".rb"``)."""
        key = _normalize(extension)
        if key in self._by_extension:
            log.debug("Replacing interpreter for %s with %s", key, interpreter.name)
        self._by_extension[key] = interpreter

    def for_path(self, path: Path) -> Interpreter:
        """Select the interpreter for ``path`` by its extension.

        Raises:
            InterpreterNotFoundError: If the extension is not registered

        """
        interpreter = self._by_extension.get(path.suffix.lower())
        if interpreter is None:
            raise InterpreterNotFoundError(
                f"No interpreter for '{path.suffix or path.name}'. "
                f"Known extensions: {list(self.extensions)}"
            )
        return interpreter


def load_interpreter_plugins() -> Mapping[str, Interpreter]:
    """Load interpreters registered under the ``mcpt.interpreters`` group.

    The entry point name is the file extension and its value an Interpreter,
    for example in a plugin's pyproject.toml::

        [project.entry-points."mcpt.interpreters"]
        ".rb" = "mcpt_ruby:ruby_interpreter"

    """
    interpreters: dict[str, Interpreter] = {}
    for entry in entry_points(group=ENTRY_POINT_GROUP):
        try:
            interpreter = entry.load()
        except Exception as e:
            log.warning("Failed to load interpreter plugin %s: %s", entry.name, e)
            continue
        if not isinstance(interpreter, Interpreter):
            log.warning(
                "Ignoring interpreter plugin %s: expected Interpreter, got %s",
                entry.name,
                type(interpreter).__name__,
            )
            continue
        interpreters[entry.name] = interpreter
    return interpreters


def _normalize(extension: str) -> str:
    extension = extension.lower()
    return extension if extension.startswith(".") else f".{extension}"
