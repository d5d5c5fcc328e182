"""Run a single test file as a deadline-bound subprocess."""

import asyncio
import logging
import os
import signal
from pathlib import Path

from mcpt.interpreters import InterpreterNotFoundError, InterpreterRegistry
from mcpt.models.result import TestOutcome
from mcpt.reporting import Reporter

log = logging.getLogger(__name__)

POSIX = os.name == "posix"


async def run_test_file(
    path: Path,
    *,
    timeout: float,
    interpreters: InterpreterRegistry,
    reporter: Reporter,
    color: bool = True,
) -> TestOutcome:
    """Execute one test file and classify how it ended.

    The child inherits stdin/stdout/stderr so its output shows up live. On
    POSIX it runs in its own process group so that a timeout kills the
    interpreter together with anything it spawned (``npx`` wrappers, etc.).

    Args:
        path: Test file to execute
        timeout: Seconds to wait before the process is killed
        interpreters: Registry used to pick the command by file extension
        reporter: Receives the start and finish events
        color: Whether the child should emit colored output

    Returns:
        ``passed`` for exit code 0, ``failed`` for any other exit code,
        ``timeout`` when the deadline was hit and ``error`` when the process
        could not be started.

    """
    try:
        interpreter = interpreters.for_path(path)
    except InterpreterNotFoundError as e:
        log.error("Cannot run %s: %s", path, e)
        outcome = TestOutcome(path=path, status="error", duration=0.0, message=str(e))
        reporter.test_finished(outcome)
        return outcome

    argv = interpreter.argv(path)
    env = {**os.environ, **interpreter.env, "FORCE_COLOR": "1" if color else "0"}

    reporter.test_started(path, argv)
    log.debug("Spawning %s with timeout=%.3fs", argv, timeout)

    loop = asyncio.get_running_loop()
    started = loop.time()

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            env=env,
            **({"process_group": 0} if POSIX else {}),
        )
    except OSError as e:
        log.error("Failed to start %s: %s", argv[0], e)
        outcome = TestOutcome(
            path=path,
            status="error",
            duration=loop.time() - started,
            message=f"Failed to start '{argv[0]}': {e}",
        )
        reporter.test_finished(outcome)
        return outcome

    try:
        exit_code = await asyncio.wait_for(process.wait(), timeout=timeout)
    except TimeoutError:
        await terminate(process)
        outcome = TestOutcome(
            path=path,
            status="timeout",
            duration=loop.time() - started,
            message=f"Timed out after {timeout:.3f}s",
        )
    else:
        outcome = TestOutcome(
            path=path,
            status="passed" if exit_code == 0 else "failed",
            duration=loop.time() - started,
            exit_code=exit_code,
        )
    finally:
        if process.returncode is None:
            await terminate(process)

    log.debug("%s finished: status=%s exit_code=%s", path, outcome.status, outcome.exit_code)
    reporter.test_finished(outcome)
    return outcome


async def terminate(process: asyncio.subprocess.Process) -> None:
    """Kill ``process`` (and its process group on POSIX) and reap it."""
    try:
        if POSIX:
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except ProcessLookupError:
        log.debug("Process %d already exited", process.pid)
    await process.wait()
