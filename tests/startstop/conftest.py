from __future__ import annotations

import threading

from startstop.api.context import CancelToken
from startstop.api.graph import Node


class _Recorder:
    def __init__(
        self,
        name: str,
        events: list[str],
        *,
        fail_on: tuple[str, ...] = (),
        block_on: tuple[str, ...] = (),
    ) -> None:
        self.name = name
        self.events = events
        self.fail_on = fail_on
        self.block_on = block_on
        self.release = threading.Event()
        self.tokens: list[CancelToken] = []

    def _record(self, op: str, ctx: CancelToken) -> None:
        self.tokens.append(ctx)
        if op in self.block_on:
            self.release.wait(5.0)
        self.events.append(f"{op}:{self.name}")
        if op in self.fail_on:
            raise RuntimeError(f"{op} failed: {self.name}")

    def __repr__(self) -> str:
        return self.name


class FakeService(_Recorder):
    """Starter + Stopper."""

    def start(self, ctx: CancelToken) -> None:
        self._record("start", ctx)

    def stop(self, ctx: CancelToken) -> None:
        self._record("stop", ctx)


class FakeResource(_Recorder):
    """Opener + Closer."""

    def open(self, ctx: CancelToken) -> None:
        self._record("open", ctx)

    def close(self, ctx: CancelToken) -> None:
        self._record("close", ctx)


class FakeFullLifecycle(FakeService, FakeResource):
    """All four capabilities."""


class FakeStarterOnly(_Recorder):
    def start(self, ctx: CancelToken) -> None:
        self._record("start", ctx)


class PlainValue:
    """No lifecycle capabilities."""

    def __init__(self, name: str) -> None:
        self.name = name


def chain(*nodes: Node) -> None:
    """Make each node depend on the one after it."""
    for dependent, dependency in zip(nodes, nodes[1:]):
        dependent.depends_on(dependency, field=f"{dependency.name}_ref")
