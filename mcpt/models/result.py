"""Models for test file execution results."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

TestStatus = Literal["passed", "failed", "timeout", "error"]


@dataclass(frozen=True, kw_only=True)
class TestOutcome:
    """Result of running a single test file.

    ``error`` means the process could not be spawned at all (missing
    interpreter, permission denied); ``message`` then carries the reason.
    """

    __test__ = False

    path: Path
    status: TestStatus
    duration: float
    exit_code: int | None = None
    message: str | None = None

    @property
    def passed(self) -> bool:
        """Whether the test file exited successfully."""
        return self.status == "passed"


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Totals for one harness invocation.

    ``duration`` is the sum of per-file durations, in seconds.
    """

    total: int = 0
    passed: int = 0
    failed: int = 0
    duration: float = 0.0

    @property
    def has_failures(self) -> bool:
        """Whether any file failed, timed out or could not be started."""
        return self.failed > 0

    @classmethod
    def degraded(cls) -> "RunSummary":
        """Summary reported when the run itself crashed before completing."""
        return cls(total=0, passed=0, failed=1, duration=0.0)
