"""Configuration for a harness run."""

from collections.abc import Sequence

from pydantic import Field, field_validator

from mcpt.models.base import Model

DEFAULT_INCLUDE = "**/*.test.{py,js,ts}"
DEFAULT_EXCLUDE = (
    "**/node_modules/**",
    "**/dist/**",
    "**/.venv/**",
    "**/__pycache__/**",
)
DEFAULT_TIMEOUT_MS = 30_000


def parse_patterns(value: str) -> Sequence[str]:
    """Split a comma-separated pattern list.

    Commas inside brace alternations (``**/*.{js,ts}``) do not split, and
    blank entries are dropped.
    """
    patterns: list[str] = []
    current: list[str] = []
    depth = 0

    for char in value:
        if char == "{":
            depth += 1
        elif char == "}" and depth:
            depth -= 1
        elif char == "," and not depth:
            patterns.append("".join(current))
            current = []
            continue
        current.append(char)
    patterns.append("".join(current))

    return tuple(p.strip() for p in patterns if p.strip())


class RunConfig(Model):
    """Options controlling discovery and execution of test files."""

    include: str = Field(
        default=DEFAULT_INCLUDE, description="Glob a test file path must match"
    )
    exclude: Sequence[str] = Field(
        default=DEFAULT_EXCLUDE,
        description="Globs for paths to skip (comma-separated string or list)",
    )
    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS, gt=0, description="Per-file timeout in ms"
    )
    verbose: bool = Field(default=False, description="Show more detailed output")
    color: bool = Field(default=True, description="Enable colored output")

    @field_validator("exclude", mode="before")
    @classmethod
    def _split_exclude(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_patterns(value)
        return value

    @field_validator("exclude", mode="after")
    @classmethod
    def _freeze_exclude(cls, value: Sequence[str]) -> Sequence[str]:
        return tuple(value)

    @property
    def timeout(self) -> float:
        """Per-file timeout in seconds."""
        return self.timeout_ms / 1000
