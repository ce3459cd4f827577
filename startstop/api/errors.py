"""Public lifecycle error types."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from startstop.api.graph import Dependence


class CycleError(Exception):
    """Dependency cycle between two or more lifecycle-eligible objects."""

    def __init__(self, path: Sequence["Dependence"]) -> None:
        if not path:
            raise ValueError("cycle path must not be empty")
        self.path: tuple[Dependence, ...] = tuple(path)
        super().__init__(_render_cycle(self.path))


def _render_cycle(path: tuple["Dependence", ...]) -> str:
    head = "circular reference detected from"
    if len(path) == 1:
        hop = path[0]
        return f"{head} field {hop.field} in {hop.node} to itself"
    lines = [head]
    lines.extend(f"field {hop.field} in {hop.node}" for hop in path)
    lines.append(f"field {path[0].field} in {path[0].node}")
    return "\n".join(lines)


class ContextError(Exception):
    """Base error reported by a finished cancellation token."""


class Cancelled(ContextError):
    """Token was cancelled explicitly."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceeded(ContextError):
    """Token deadline elapsed."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class StopErrors(ExceptionGroup):
    """All failures collected by a best-effort stop pass."""
