"""Lifecycle runtime modules."""

from startstop.runtime.config import LifecycleConfig, load_lifecycle_config
from startstop.runtime.context import CancelContext, background, with_cancel, with_timeout
from startstop.runtime.entrypoint import run, wait_for_termination
from startstop.runtime.graph import LifecycleGraph
from startstop.runtime.levels import all_paths, levels
from startstop.runtime.logging import configure_logging, get_logger, setup_logging
from startstop.runtime.timeout import run_with_context

__all__ = [
    "CancelContext",
    "LifecycleConfig",
    "LifecycleGraph",
    "all_paths",
    "background",
    "configure_logging",
    "get_logger",
    "levels",
    "load_lifecycle_config",
    "run",
    "run_with_context",
    "setup_logging",
    "wait_for_termination",
    "with_cancel",
    "with_timeout",
]
