"""Process entrypoint: start, wait for termination, stop."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable
from types import FrameType
from typing import TYPE_CHECKING

from startstop.api.context import CancelToken
from startstop.api.logging import LoggerPort
from startstop.runtime.config import LifecycleConfig
from startstop.runtime.context import background, with_cancel, with_timeout
from startstop.runtime.logging import setup_logging, shutdown_logging

if TYPE_CHECKING:
    from startstop.runtime.graph import LifecycleGraph

_LOG = logging.getLogger("startstop.runtime")
TERMINATION_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)
_WAIT_POLL_SECONDS = 0.25

SignalHandler = Callable[[int, FrameType | None], object] | int | None


def run(
    graph: "LifecycleGraph",
    *,
    config: LifecycleConfig | None = None,
    terminate: CancelToken | None = None,
) -> None:
    """Run ``graph`` until SIGINT/SIGTERM or ``terminate`` fires.

    Failures are reported, never raised.
    """
    cfg = config or graph.config
    owns_logging = setup_logging(cfg.logging_config())
    reporter = graph.logger if graph.logger is not None else _LOG
    try:
        _run_phases(graph, cfg, reporter, terminate)
    finally:
        if owns_logging:
            shutdown_logging()


def _run_phases(
    graph: "LifecycleGraph",
    cfg: LifecycleConfig,
    reporter: LoggerPort,
    terminate: CancelToken | None,
) -> None:
    start_ctx, cancel_start = with_timeout(background(), cfg.start_timeout_seconds)
    try:
        try:
            graph.start(start_ctx)
        except Exception as exc:
            reporter.error("failed_to_start error=%s", exc)
            return

        wait_for_termination(terminate)

        stop_ctx, cancel_stop = with_timeout(background(), cfg.stop_timeout_seconds)
        try:
            graph.stop(stop_ctx)
        except Exception as exc:
            reporter.error("failed_to_stop_cleanly error=%s", exc)
        finally:
            cancel_stop()
    finally:
        cancel_start()


def wait_for_termination(terminate: CancelToken | None = None) -> None:
    """Block until SIGINT/SIGTERM arrives or ``terminate`` is done.

    Signal handlers are only installed from the main thread and are restored
    on return; other threads must supply ``terminate``.
    """
    received, fire = with_cancel(terminate if terminate is not None else background())
    previous = _install_handlers(fire)
    try:
        while not received.wait(_WAIT_POLL_SECONDS):
            pass
    finally:
        _restore_handlers(previous)


def _install_handlers(fire: Callable[[], None]) -> dict[signal.Signals, SignalHandler]:
    if threading.current_thread() is not threading.main_thread():
        _LOG.warning("signal_handlers_skipped thread=%s", threading.current_thread().name)
        return {}

    def _handle(signum: int, frame: FrameType | None) -> None:
        _ = frame
        _LOG.info("termination_signal signal=%s", signal.Signals(signum).name)
        fire()

    previous: dict[signal.Signals, SignalHandler] = {}
    for signum in TERMINATION_SIGNALS:
        previous[signum] = signal.signal(signum, _handle)
    return previous


def _restore_handlers(previous: dict[signal.Signals, SignalHandler]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
