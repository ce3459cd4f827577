"""Whole-phase timeout and cancellation wrapper."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable

from startstop.api.context import CancelToken
from startstop.api.errors import Cancelled

Phase = Callable[[CancelToken], None]


def run_with_context(ctx: CancelToken, phase: Phase, *, name: str = "startstop-phase") -> None:
    """Run ``phase(ctx)`` on a daemon thread and race it against ``ctx``.

    Whichever settles first decides the outcome. When ``ctx`` wins its error
    is raised right away; the phase is abandoned, not cancelled. It keeps
    running in the background and its result is discarded, so callers must
    treat the extent of its side effects as unknown.
    """
    outcomes: queue.SimpleQueue[BaseException | None] = queue.SimpleQueue()

    def _worker() -> None:
        error: BaseException | None = None
        try:
            phase(ctx)
        except BaseException as exc:  # re-raised on the waiting thread
            error = exc
        outcomes.put(error)

    def _on_done() -> None:
        outcomes.put(ctx.error() or Cancelled())

    # A token that is already done wins before the phase even begins.
    ctx.add_done_callback(_on_done)
    try:
        threading.Thread(target=_worker, name=name, daemon=True).start()
        error = outcomes.get()
    finally:
        ctx.remove_done_callback(_on_done)
    if error is not None:
        raise error
