from __future__ import annotations

import time

from startstop.api.errors import Cancelled, DeadlineExceeded
from startstop.runtime.context import CancelContext, background, with_cancel, with_timeout


def test_background_is_never_done() -> None:
    token = background()
    assert token.is_done() is False
    assert token.error() is None
    assert token.deadline is None
    assert token.wait(0.01) is False


def test_cancel_marks_done_and_runs_callbacks_once() -> None:
    ctx, cancel = with_cancel(background())
    calls: list[str] = []
    ctx.add_done_callback(lambda: calls.append("done"))

    cancel()
    cancel()

    assert ctx.is_done() is True
    assert isinstance(ctx.error(), Cancelled)
    assert calls == ["done"]


def test_callback_added_after_done_runs_immediately() -> None:
    ctx, cancel = with_cancel(background())
    cancel()
    calls: list[str] = []
    ctx.add_done_callback(lambda: calls.append("late"))
    assert calls == ["late"]


def test_timeout_expires_with_deadline_error() -> None:
    ctx, cancel = with_timeout(background(), 0.02)
    try:
        assert ctx.wait(2.0) is True
        assert isinstance(ctx.error(), DeadlineExceeded)
    finally:
        cancel()


def test_non_positive_timeout_is_done_immediately() -> None:
    ctx, _ = with_timeout(background(), 0.0)
    assert ctx.is_done() is True
    assert isinstance(ctx.error(), DeadlineExceeded)


def test_cancel_before_deadline_keeps_cancelled_error() -> None:
    ctx, cancel = with_timeout(background(), 10.0)
    cancel()
    assert isinstance(ctx.error(), Cancelled)


def test_child_inherits_parent_error() -> None:
    parent, cancel_parent = with_cancel(background())
    child, _ = with_timeout(parent, 10.0)

    cancel_parent()

    assert child.is_done() is True
    assert isinstance(child.error(), Cancelled)


def test_child_of_done_parent_starts_done() -> None:
    parent, _ = with_timeout(background(), 0.0)
    child = CancelContext(parent)
    assert isinstance(child.error(), DeadlineExceeded)


def test_child_deadline_never_extends_parent() -> None:
    parent, cancel_parent = with_timeout(background(), 1.0)
    child, cancel_child = with_timeout(parent, 60.0)
    try:
        assert child.deadline == parent.deadline
        assert child.deadline is not None
        assert child.deadline <= time.monotonic() + 1.0
    finally:
        cancel_child()
        cancel_parent()


def test_removed_callback_is_not_called() -> None:
    ctx, cancel = with_cancel(background())
    calls: list[str] = []

    def _record() -> None:
        calls.append("done")

    ctx.add_done_callback(_record)
    ctx.remove_done_callback(_record)
    ctx.remove_done_callback(_record)
    cancel()

    assert calls == []


def test_finished_children_unregister_from_parent() -> None:
    parent, cancel_parent = with_cancel(background())
    try:
        for _ in range(50):
            _, cancel_child = with_timeout(parent, 10.0)
            cancel_child()
        assert parent._callbacks == []
    finally:
        cancel_parent()
