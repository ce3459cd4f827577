"""Dependency-ordered start/stop for injected object graphs."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from startstop.runtime.graph import LifecycleGraph


def run(graph: "LifecycleGraph") -> None:
    """Start ``graph``, block until SIGINT/SIGTERM, then stop it."""
    from startstop.runtime.entrypoint import run as runtime_run

    runtime_run(graph)

__all__ = ["run"]
