"""Progress and summary reporting for harness runs."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path

from rich.console import Console
from rich.text import Text

from mcpt.models.result import RunSummary, TestOutcome

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
    "error": "❗",
    "timeout": "⏱️",
}

STATUS_LABELS = {
    "passed": "Test passed",
    "failed": "Test failed",
    "error": "Test could not be started",
    "timeout": "Test timed out",
}

STATUS_STYLES = {
    "passed": "green",
    "failed": "red",
    "error": "red",
    "timeout": "red",
}


class Reporter(ABC):
    """Receives progress events from the harness."""

    @abstractmethod
    def no_files(self) -> None:
        """Called when discovery found nothing to run."""

    @abstractmethod
    def files_discovered(self, files: Sequence[Path]) -> None:
        """Called once with the ordered list of files about to run."""

    @abstractmethod
    def test_started(self, path: Path, argv: Sequence[str]) -> None:
        """Called right before the process for ``path`` is spawned."""

    @abstractmethod
    def test_finished(self, outcome: TestOutcome) -> None:
        """Called once per file with its final outcome."""

    @abstractmethod
    def summary(self, summary: RunSummary) -> None:
        """Called once at the end of the run."""


@dataclass(frozen=True, kw_only=True)
class LogReporter(Reporter):
    """Reporter writing human-readable lines to a logger."""

    log: logging.Logger = field(default_factory=lambda: logging.getLogger("mcpt.report"))
    verbose: bool = False
    color: bool = True

    @cached_property
    def console(self) -> Console:
        """Console used only to render styled fragments into strings."""
        return Console(
            force_terminal=True,
            color_system="standard",
            no_color=not self.color,
            highlight=False,
            emoji=False,
        )

    def style(self, text: str, *styles: str) -> str:
        """Render ``text`` with rich styles (e.g. ``"bold"``, ``"red"``)."""
        if not self.color or not styles:
            return text
        with self.console.capture() as capture:
            self.console.print(Text(text, style=" ".join(styles)), end="", soft_wrap=True)
        return capture.get()

    def no_files(self) -> None:
        self.log.warning(self.style("⚠️ No test files found", "yellow"))

    def files_discovered(self, files: Sequence[Path]) -> None:
        self.log.info(
            "%s %s %s",
            self.style("🔍 Found", "blue"),
            self.style(str(len(files)), "bold"),
            self.style("test files", "blue"),
        )
        if self.verbose:
            for path in files:
                self.log.info("  %s %s", self.style("-", "dim"), path)

    def test_started(self, path: Path, argv: Sequence[str]) -> None:
        self.log.info(
            "%s %s", self.style("🧪 Running test:", "cyan"), self.style(str(path), "bold")
        )
        if self.verbose:
            self.log.info(
                "%s %s", self.style("📋 Command:", "blue"), self.style(" ".join(argv), "dim")
            )

    def test_finished(self, outcome: TestOutcome) -> None:
        level = logging.INFO if outcome.passed else logging.ERROR
        self.log.log(
            level,
            "%s %s (%s): %s",
            STATUS_SYMBOLS[outcome.status],
            self.style(STATUS_LABELS[outcome.status], STATUS_STYLES[outcome.status]),
            self.style(f"{outcome.duration:.2f}s", "yellow"),
            self.style(str(outcome.path), "bold"),
        )
        if outcome.message and (self.verbose or outcome.status == "error"):
            self.log.log(level, "  Message: %s", outcome.message)

    def summary(self, summary: RunSummary) -> None:
        failed_style = "red" if summary.has_failures else "dim"

        self.log.info(self.style("📊 Test Summary:", "magenta"))
        self.log.info("   %s %d", self.style("Total:", "blue"), summary.total)
        self.log.info("   %s %d", self.style("Passed:", "green"), summary.passed)
        self.log.info("   %s %d", self.style("Failed:", failed_style), summary.failed)
        self.log.info(
            "   %s %.2fs", self.style("Duration:", "yellow"), summary.duration
        )

        if summary.has_failures:
            self.log.error(self.style("❌ Some tests failed!", "red"))
        else:
            self.log.info(self.style("✅ All tests passed!", "green"))
