"""Public cancellation token API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from startstop.api.errors import ContextError

DoneCallback = Callable[[], None]


class CancelToken(ABC):
    """Cancellation and deadline signal handed to every lifecycle call.

    Lifecycle implementations that block (network, disk) should observe the
    token and return promptly once it is done; nothing interrupts them
    forcibly.
    """

    @property
    @abstractmethod
    def deadline(self) -> float | None:
        """Return the ``time.monotonic`` deadline, if any."""

    @abstractmethod
    def is_done(self) -> bool:
        """Return whether the token was cancelled or its deadline elapsed."""

    @abstractmethod
    def error(self) -> ContextError | None:
        """Return the reason the token is done, or ``None`` while live."""

    @abstractmethod
    def wait(self, timeout: float | None = None) -> bool:
        """Block until done or ``timeout`` seconds pass; return ``is_done()``."""

    @abstractmethod
    def add_done_callback(self, callback: DoneCallback) -> None:
        """Run ``callback`` once the token is done (immediately if it already is)."""

    @abstractmethod
    def remove_done_callback(self, callback: DoneCallback) -> None:
        """Forget ``callback``; no-op if it already ran or was never added."""
