"""
Run a callable against a wall-clock deadline.

The callable runs on a daemon thread while the caller waits on a one-shot
queue. If the deadline passes first, the caller stops waiting and moves on.
The worker is never killed; whatever it produces afterwards is discarded, and
being a daemon it does not keep the interpreter alive.
"""

import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 1.0


@dataclass
class TimeboxResult(Generic[T]):
    """Outcome of a timeboxed call."""

    finished: bool
    value: T | None = None

    @property
    def timed_out(self) -> bool:
        return not self.finished


@dataclass
class _Outcome(Generic[T]):
    value: T | None = None
    error: BaseException | None = None


def run_with_timeout(
    fn: Callable[[], T],
    timeout: float = DEFAULT_TIMEOUT,
    name: str = "aittributor-timebox",
) -> TimeboxResult[T]:
    """Run ``fn`` on a worker thread, waiting at most ``timeout`` seconds.

    An exception raised by ``fn`` before the deadline is re-raised in the
    caller. After the deadline, the worker's result or exception is ignored.

    Raises:
        ValueError: If ``timeout`` is not a positive number.
    """
    if not timeout > 0:
        raise ValueError(f"timeout must be positive, got {timeout!r}")

    handoff: queue.Queue[_Outcome[T]] = queue.Queue(maxsize=1)

    def worker() -> None:
        try:
            handoff.put(_Outcome(value=fn()))
        except BaseException as e:
            handoff.put(_Outcome(error=e))

    thread = threading.Thread(target=worker, daemon=True, name=name)
    thread.start()

    try:
        outcome = handoff.get(timeout=timeout)
    except queue.Empty:
        logger.debug(f"{name} did not finish within {timeout}s")
        return TimeboxResult(finished=False)

    if outcome.error is not None:
        raise outcome.error
    return TimeboxResult(finished=True, value=outcome.value)
