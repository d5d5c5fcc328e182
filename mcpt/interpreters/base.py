"""Interpreter definitions used to launch test files."""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path


def path_only(path: Path) -> Sequence[str]:
    """Default argument builder: pass the test file path alone."""
    return [str(path)]


@dataclass(frozen=True, kw_only=True)
class Interpreter:
    """How to execute a test file of a given type.

    The final command line is ``command + build_args(path)``; ``env`` is
    layered on top of the caller's environment.
    """

    name: str
    command: Sequence[str]
    build_args: Callable[[Path], Sequence[str]] = path_only
    env: Mapping[str, str] = field(default_factory=dict)

    def argv(self, path: Path) -> Sequence[str]:
        """Full command line for running ``path``."""
        return [*self.command, *self.build_args(path)]
