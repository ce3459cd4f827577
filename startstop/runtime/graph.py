"""Level-ordered start/stop driver over a prebuilt object graph."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Iterable
from typing import cast

from startstop.api.capabilities import Capability, Closer, Opener, Starter, Stopper
from startstop.api.context import CancelToken
from startstop.api.errors import StopErrors
from startstop.api.graph import Node
from startstop.api.logging import LoggerPort
from startstop.runtime.config import LifecycleConfig, load_lifecycle_config
from startstop.runtime.levels import levels
from startstop.runtime.timeout import run_with_context

NodeAction = Callable[[CancelToken, Node], None]


class LifecycleGraph:
    """Starts and stops graph nodes in dependency order.

    A graph is started and stopped at most once; a second ``start`` raises
    ``RuntimeError``. The started record is written by the start pass and
    only read by the stop pass, so concurrent phases on one graph are not
    supported.
    """

    def __init__(
        self,
        nodes: Iterable[Node] = (),
        *,
        logger: LoggerPort | None = None,
        config: LifecycleConfig | None = None,
    ) -> None:
        self.logger = logger
        self.config = config or load_lifecycle_config()
        self._nodes: list[Node] = []
        self._members: set[Node] = set()
        self._started: list[Node] = []
        self._start_attempted = False
        for node in nodes:
            self.add(node)

    def add(self, node: Node) -> None:
        """Register one node."""
        if node in self._members:
            raise ValueError(f"duplicate node: {node}")
        self._members.add(node)
        self._nodes.append(node)

    def objects(self) -> tuple[Node, ...]:
        return tuple(self._nodes)

    @property
    def started(self) -> tuple[Node, ...]:
        """Nodes whose open/start calls completed, in start order."""
        return tuple(self._started)

    def execution_levels(self) -> tuple[tuple[Node, ...], ...]:
        """Return start-time levels, most dependencies first."""
        return tuple(tuple(level) for level in levels(self._nodes))

    def start(self, ctx: CancelToken) -> None:
        """Open and start every eligible node, dependencies first."""
        if self._start_attempted:
            raise RuntimeError("graph was already started; start/stop runs once per graph")
        self._start_attempted = True
        run_with_context(ctx, self._try_start, name="startstop-start")

    def stop(self, ctx: CancelToken) -> None:
        """Stop and close started nodes, dependents first."""
        run_with_context(ctx, self._stop, name="startstop-stop")

    def run(self, *, terminate: CancelToken | None = None) -> None:
        """Start, wait for SIGINT/SIGTERM (or ``terminate``), then stop."""
        from startstop.runtime.entrypoint import run as runtime_run

        runtime_run(self, config=self.config, terminate=terminate)

    def _try_start(self, ctx: CancelToken) -> None:
        ordered = levels(self._nodes)
        started: list[Node] = []
        try:
            for level in reversed(ordered):
                self._run_level(ctx, level, self._start_node, started)
        finally:
            self._started = started

    def _stop(self, ctx: CancelToken) -> None:
        ordered = levels(self._started)
        failures: list[Exception] | None = None if self.config.fail_fast_stop else []

        def _stop_action(token: CancelToken, node: Node) -> None:
            self._stop_node(token, node, failures)

        for level in ordered:
            self._run_level(ctx, level, _stop_action, [])
        if failures:
            raise StopErrors(f"failed to stop cleanly ({len(failures)} errors)", failures)

    def _run_level(
        self,
        ctx: CancelToken,
        level: list[Node],
        action: NodeAction,
        completed: list[Node],
    ) -> None:
        if not self.config.parallel_levels or len(level) < 2:
            for node in level:
                action(ctx, node)
                completed.append(node)
            return

        # Daemon workers: a hung call must not block interpreter exit.
        pending: queue.SimpleQueue[Node] = queue.SimpleQueue()
        for node in level:
            pending.put(node)
        outcomes: queue.SimpleQueue[tuple[Node, BaseException | None]] = queue.SimpleQueue()

        def _worker() -> None:
            while True:
                try:
                    node = pending.get_nowait()
                except queue.Empty:
                    return
                error: BaseException | None = None
                try:
                    action(ctx, node)
                except BaseException as exc:  # re-raised on the phase thread
                    error = exc
                outcomes.put((node, error))

        workers = min(self.config.max_workers, len(level))
        for index in range(workers):
            threading.Thread(target=_worker, name=f"startstop-level-{index}", daemon=True).start()

        errors: list[BaseException] = []
        for _ in level:
            node, error = outcomes.get()
            if error is None:
                completed.append(node)
            else:
                errors.append(error)
        if errors:
            raise errors[0]

    def _start_node(self, ctx: CancelToken, node: Node) -> None:
        if node.provides(Capability.OPEN):
            self._debug("opening %s", node)
            cast(Opener, node.value).open(ctx)
        if node.provides(Capability.START):
            self._debug("starting %s", node)
            cast(Starter, node.value).start(ctx)

    def _stop_node(
        self,
        ctx: CancelToken,
        node: Node,
        failures: list[Exception] | None,
    ) -> None:
        if node.provides(Capability.STOP):
            self._debug("stopping %s", node)
            try:
                cast(Stopper, node.value).stop(ctx)
            except Exception as exc:
                self._error("error stopping %s: %s", node, exc)
                if failures is None:
                    raise
                failures.append(exc)
        if node.provides(Capability.CLOSE):
            self._debug("closing %s", node)
            try:
                cast(Closer, node.value).close(ctx)
            except Exception as exc:
                self._error("error closing %s: %s", node, exc)
                if failures is None:
                    raise
                failures.append(exc)

    def _debug(self, message: str, *args: object) -> None:
        if self.logger is not None:
            self.logger.debug(message, *args)

    def _error(self, message: str, *args: object) -> None:
        if self.logger is not None:
            self.logger.error(message, *args)
