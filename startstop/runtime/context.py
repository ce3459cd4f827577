"""Cancellation token implementation."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from startstop.api.context import CancelToken, DoneCallback
from startstop.api.errors import Cancelled, ContextError, DeadlineExceeded

CancelFunc = Callable[[], None]


class _BackgroundToken(CancelToken):
    """Root token that is never done."""

    @property
    def deadline(self) -> float | None:
        return None

    def is_done(self) -> bool:
        return False

    def error(self) -> ContextError | None:
        return None

    def wait(self, timeout: float | None = None) -> bool:
        if timeout is not None:
            time.sleep(max(0.0, timeout))
            return False
        threading.Event().wait()
        return False

    def add_done_callback(self, callback: DoneCallback) -> None:
        _ = callback

    def remove_done_callback(self, callback: DoneCallback) -> None:
        _ = callback

    def __repr__(self) -> str:
        return "background"


_BACKGROUND = _BackgroundToken()


class CancelContext(CancelToken):
    """Token done on explicit cancel, deadline expiry, or parent completion."""

    def __init__(self, parent: CancelToken | None = None, *, deadline: float | None = None) -> None:
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._error: ContextError | None = None
        self._callbacks: list[DoneCallback] = []
        self._timer: threading.Timer | None = None
        self._parent: CancelToken | None = None
        self._on_parent_done: DoneCallback | None = None

        parent_deadline = parent.deadline if parent is not None else None
        if deadline is None:
            self._deadline = parent_deadline
        elif parent_deadline is None:
            self._deadline = deadline
        else:
            self._deadline = min(deadline, parent_deadline)

        if parent is not None:
            self._follow(parent)
        if deadline is not None and not self._done.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0.0:
                self._finish(DeadlineExceeded())
            else:
                timer = threading.Timer(remaining, self._finish, args=(DeadlineExceeded(),))
                timer.daemon = True
                with self._lock:
                    if not self._done.is_set():
                        self._timer = timer
                        timer.start()

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def is_done(self) -> bool:
        return self._done.is_set()

    def error(self) -> ContextError | None:
        with self._lock:
            return self._error

    def wait(self, timeout: float | None = None) -> bool:
        return self._done.wait(timeout)

    def add_done_callback(self, callback: DoneCallback) -> None:
        with self._lock:
            if not self._done.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_done_callback(self, callback: DoneCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def cancel(self) -> None:
        """Mark the token cancelled; no-op once done."""
        self._finish(Cancelled())

    def _follow(self, parent: CancelToken) -> None:
        def _on_parent_done() -> None:
            self._finish(parent.error() or Cancelled())

        self._parent = parent
        self._on_parent_done = _on_parent_done
        parent.add_done_callback(_on_parent_done)

    def _finish(self, error: ContextError) -> None:
        with self._lock:
            if self._done.is_set():
                return
            self._error = error
            self._done.set()
            callbacks, self._callbacks = self._callbacks, []
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        # A finished child no longer needs to hear from its parent.
        if self._parent is not None and self._on_parent_done is not None:
            self._parent.remove_done_callback(self._on_parent_done)
        for callback in callbacks:
            callback()

    def __repr__(self) -> str:
        state = type(self._error).__name__ if self._error is not None else "live"
        return f"CancelContext(state={state}, deadline={self._deadline})"


def background() -> CancelToken:
    """Return the root token that is never cancelled."""
    return _BACKGROUND


def with_cancel(parent: CancelToken) -> tuple[CancelContext, CancelFunc]:
    """Return a child token plus the function that cancels it."""
    ctx = CancelContext(parent)
    return ctx, ctx.cancel


def with_timeout(parent: CancelToken, seconds: float) -> tuple[CancelContext, CancelFunc]:
    """Return a child token done after ``seconds`` plus its cancel function."""
    ctx = CancelContext(parent, deadline=time.monotonic() + seconds)
    return ctx, ctx.cancel
