"""Deadline enforcement for in-flight gateway requests.

Each request gets one TimeoutState. A timer armed on the event loop and the
upstream task race to deliver an outcome through ``complete``, which lets
only the first writer through. Whatever loses the race is dropped without
a log entry or a response.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from gateway_service_libs.error_handling import (
    GatewayError,
    create_error_detail_with_context,
)
from gateway_service_libs.logging_utils import create_service_logger

from common_core.error_enums import ErrorCode
from services.plan_gateway_service.internal_models import TimeoutState

logger = create_service_logger("plan_gateway.timeout_coordinator")

T = TypeVar("T")


class TimeoutCoordinator:
    """Owns the single deadline of every in-flight request."""

    def __init__(self, timeout_seconds: float, service_name: str) -> None:
        self.timeout_seconds = timeout_seconds
        self._service_name = service_name

    def begin(self, request_id: str) -> TimeoutState:
        """Record the deadline and arm the timer that enforces it."""
        loop = asyncio.get_running_loop()
        now = loop.time()
        state = TimeoutState(
            request_id=request_id,
            timeout_seconds=self.timeout_seconds,
            started_at=now,
            deadline=now + self.timeout_seconds,
        )
        state.outcome = loop.create_future()
        state.timer = loop.call_at(state.deadline, self._expire, state)
        return state

    def remaining(self, state: TimeoutState) -> float:
        return state.remaining(asyncio.get_running_loop().time())

    async def within_deadline(self, state: TimeoutState, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the deadline fires first.

        Used for work that happens before the upstream call, such as reading
        the client body. On expiry the awaitable is cancelled and the
        timeout_error delivered by the timer is raised.
        """
        if state.outcome is None:
            raise RuntimeError("within_deadline called before begin")

        work = asyncio.ensure_future(awaitable)
        try:
            await asyncio.wait({work, state.outcome}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            self.release(state)
            raise

        if work.done():
            return work.result()

        work.cancel()
        outcome = state.outcome.result()
        if isinstance(outcome, BaseException):
            raise outcome
        raise RuntimeError(f"Request {state.request_id} was released while waiting")

    async def run_upstream(
        self, state: TimeoutState, task: Callable[[], Awaitable[T]]
    ) -> T:
        """Run ``task`` under the request deadline.

        Returns the task's result when it finishes first. Raises the task's
        GatewayError when it fails first, and a timeout_error when the
        deadline fires first; in that case the task is cancelled and its
        eventual resolution is discarded.
        """
        if state.outcome is None:
            raise RuntimeError("run_upstream called before begin")

        if not state.responded:
            state.upstream = asyncio.ensure_future(task())
            state.upstream.add_done_callback(lambda fut: self._on_upstream_done(state, fut))

        try:
            outcome = await asyncio.shield(state.outcome)
        except asyncio.CancelledError:
            # The request task itself went away (client disconnect, shutdown)
            self.release(state)
            raise

        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def complete(self, state: TimeoutState, result: Any) -> bool:
        """Deliver ``result`` unless an outcome was already delivered.

        Returns:
            True for the first call on ``state``, False for every later one
        """
        if state.responded:
            return False
        state.responded = True
        if state.timer is not None:
            state.timer.cancel()
        if state.outcome is not None and not state.outcome.done():
            state.outcome.set_result(result)
        return True

    def _expire(self, state: TimeoutState) -> None:
        if state.responded:
            return
        now = asyncio.get_running_loop().time()
        elapsed = state.elapsed(now)
        state.cancelled = True
        if state.upstream is not None and not state.upstream.done():
            state.upstream.cancel()

        error_detail = create_error_detail_with_context(
            error_code=ErrorCode.TIMEOUT_ERROR,
            message="Server response timeout reached",
            service=self._service_name,
            operation="enforce_deadline",
            request_id=state.request_id,
            details=f"Request took longer than {state.timeout_seconds:g} seconds to complete",
            context={
                "timeout_seconds": state.timeout_seconds,
                "elapsed_ms": round(elapsed * 1000),
            },
        )
        if self.complete(state, GatewayError(error_detail)):
            logger.warning(
                "Request deadline reached",
                request_id=state.request_id,
                upstream_started=state.upstream is not None,
                elapsed_ms=round(elapsed * 1000),
                timeout_seconds=state.timeout_seconds,
            )

    def _on_upstream_done(self, state: TimeoutState, fut: asyncio.Future[Any]) -> None:
        if fut.cancelled():
            return
        exc = fut.exception()  # retrieved even when discarded, so asyncio stays quiet
        if state.responded:
            return

        if exc is None:
            self.complete(state, fut.result())
        elif isinstance(exc, GatewayError):
            self.complete(state, exc)
        else:
            error_detail = create_error_detail_with_context(
                error_code=ErrorCode.INTERNAL_ERROR,
                message="Upstream call failed unexpectedly",
                service=self._service_name,
                operation="await_upstream",
                request_id=state.request_id,
                details=str(exc) or type(exc).__name__,
            )
            logger.error(
                f"Unexpected upstream failure: {exc!r}",
                request_id=state.request_id,
            )
            self.complete(state, GatewayError(error_detail))

    def release(self, state: TimeoutState) -> None:
        """Disarm the deadline of a request that is finished or abandoned.

        Closes the gate without an outcome if none was delivered yet, and
        cancels an upstream call that is still running.
        """
        if self.complete(state, None):
            state.cancelled = True
        if state.upstream is not None and not state.upstream.done():
            state.cancelled = True
            state.upstream.cancel()
