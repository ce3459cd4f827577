"""Public lifecycle API contracts."""

from startstop.api.capabilities import (
    Capability,
    Closer,
    Opener,
    Starter,
    Stopper,
    capabilities_of,
)
from startstop.api.context import CancelToken
from startstop.api.errors import (
    Cancelled,
    ContextError,
    CycleError,
    DeadlineExceeded,
    StopErrors,
)
from startstop.api.graph import Dependence, Node
from startstop.api.logging import LoggerPort, LoggingConfig

__all__ = [
    "CancelToken",
    "Cancelled",
    "Capability",
    "Closer",
    "ContextError",
    "CycleError",
    "DeadlineExceeded",
    "Dependence",
    "LoggerPort",
    "LoggingConfig",
    "Node",
    "Opener",
    "StopErrors",
    "Starter",
    "Stopper",
    "capabilities_of",
]
