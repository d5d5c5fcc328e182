"""Sequential scheduling of test file execution."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from mcpt.aggregator import ResultAggregator
from mcpt.interpreters import InterpreterRegistry
from mcpt.models.result import RunSummary, TestOutcome
from mcpt.reporting import Reporter
from mcpt.supervisor import run_test_file

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class RunReport:
    """Outcomes of a run, in execution order, plus their totals."""

    outcomes: Sequence[TestOutcome]
    summary: RunSummary


@dataclass(frozen=True, kw_only=True)
class TestOrchestrator:
    """Runs test files one at a time, each to completion, and tallies them."""

    __test__ = False

    interpreters: InterpreterRegistry
    reporter: Reporter
    timeout: float
    color: bool = True

    async def run_tests(self, files: Sequence[Path]) -> RunReport:
        """Run every file in order.

        Args:
            files: Test files, already ordered

        Returns:
            One outcome per file and the aggregated summary

        """
        if not files:
            log.info("No test files provided")
            return RunReport(outcomes=[], summary=RunSummary())

        log.debug("Running %d test file(s) sequentially", len(files))
        aggregator = ResultAggregator()
        outcomes: list[TestOutcome] = []

        for path in files:
            outcome = await self._run_one(path)
            aggregator.add(outcome)
            outcomes.append(outcome)

        summary = aggregator.summary()
        log.debug(
            "Test execution completed: passed=%d failed=%d",
            summary.passed,
            summary.failed,
        )
        return RunReport(outcomes=outcomes, summary=summary)

    async def _run_one(self, path: Path) -> TestOutcome:
        """Run a file, turning unexpected errors into an ``error`` outcome."""
        try:
            return await run_test_file(
                path,
                timeout=self.timeout,
                interpreters=self.interpreters,
                reporter=self.reporter,
                color=self.color,
            )
        except Exception as e:
            log.error("Test execution failed for %s: %s", path, e, exc_info=e)
            outcome = TestOutcome(path=path, status="error", duration=0.0, message=str(e))
            self.reporter.test_finished(outcome)
            return outcome
