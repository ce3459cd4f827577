"""Public lifecycle capability contracts."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable

from startstop.api.context import CancelToken


@runtime_checkable
class Opener(Protocol):
    """Objects opened by the start pass."""

    def open(self, ctx: CancelToken) -> None:
        """Acquire resources; raise on failure."""


@runtime_checkable
class Closer(Protocol):
    """Objects closed by the stop pass."""

    def close(self, ctx: CancelToken) -> None:
        """Release resources; raise on failure."""


@runtime_checkable
class Starter(Protocol):
    """Objects started by the start pass."""

    def start(self, ctx: CancelToken) -> None:
        """Begin operating; raise on failure."""


@runtime_checkable
class Stopper(Protocol):
    """Objects stopped by the stop pass."""

    def stop(self, ctx: CancelToken) -> None:
        """Cease operating; raise on failure."""


class Capability(Enum):
    OPEN = "open"
    CLOSE = "close"
    START = "start"
    STOP = "stop"


_PROTOCOLS: tuple[tuple[Capability, type], ...] = (
    (Capability.OPEN, Opener),
    (Capability.CLOSE, Closer),
    (Capability.START, Starter),
    (Capability.STOP, Stopper),
)


def capabilities_of(value: object) -> frozenset[Capability]:
    """Return the lifecycle capabilities ``value`` provides."""
    return frozenset(cap for cap, protocol in _PROTOCOLS if isinstance(value, protocol))
