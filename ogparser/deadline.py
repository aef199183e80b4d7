"""Wall-clock time budgets for blocking HTTP calls.

httpx applies its timeout to each phase of a request separately (connect,
header read, every body read), so a slow peer can hold a call for a
multiple of the configured value.  :func:`call_with_deadline` runs the call
on a daemon thread and stops waiting once the budget is spent.
"""

from __future__ import annotations

import threading
from typing import Callable, TypeVar

T = TypeVar("T")


class DeadlineExceeded(TimeoutError):
    """The wall-clock budget ran out before the call finished."""


def call_with_deadline(
    func: Callable[[threading.Event], T],
    timeout: float,
    *,
    name: str = "ogparser-deadline",
) -> T:
    """Run ``func(cancelled)`` and return its result within *timeout* seconds.

    *func* receives an event that is set when the caller gives up, so a
    streaming read can stop at its next chunk.  The worker thread is left
    to finish on its own; whatever it returns after that point is dropped.

    Raises:
        DeadlineExceeded: If *func* is still running after *timeout* seconds.
        Exception: Anything *func* raised, re-raised in the calling thread.
    """
    cancelled = threading.Event()
    done = threading.Event()
    outcome: dict[str, object] = {}

    def _target() -> None:
        try:
            outcome["value"] = func(cancelled)
        except BaseException as exc:
            outcome["error"] = exc
        finally:
            done.set()

    worker = threading.Thread(target=_target, name=name, daemon=True)
    worker.start()

    if not done.wait(timeout):
        cancelled.set()
        raise DeadlineExceeded(f"no result after {timeout:.1f}s")

    if "error" in outcome:
        raise outcome["error"]  # type: ignore[misc]
    return outcome["value"]  # type: ignore[return-value]
