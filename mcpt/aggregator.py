"""Aggregation of per-file outcomes into run totals."""

from collections.abc import Iterable

from mcpt.models.result import RunSummary, TestOutcome


class ResultAggregator:
    """Running totals, updated once per completed test file."""

    def __init__(self) -> None:
        self._passed = 0
        self._failed = 0
        self._duration = 0.0

    def add(self, outcome: TestOutcome) -> None:
        """Count ``outcome``; anything but ``passed`` counts as a failure."""
        if outcome.passed:
            self._passed += 1
        else:
            self._failed += 1
        self._duration += outcome.duration

    def summary(self) -> RunSummary:
        return RunSummary(
            total=self._passed + self._failed,
            passed=self._passed,
            failed=self._failed,
            duration=self._duration,
        )


def fold(outcomes: Iterable[TestOutcome]) -> RunSummary:
    """Summarize ``outcomes`` in a single pass."""
    aggregator = ResultAggregator()
    for outcome in outcomes:
        aggregator.add(outcome)
    return aggregator.summary()
