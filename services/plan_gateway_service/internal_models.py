"""Internal per-request models for Plan Gateway Service.

None of these objects are shared between requests: each request task
creates its own RequestContext and TimeoutState and drops them once the
terminal response has been written.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class GatewayStage(str, Enum):
    """Pipeline stages of one request, in execution order."""

    RECEIVED = "received"
    TRANSLATING = "translating"
    CALLING_UPSTREAM = "calling-upstream"
    SANITIZING = "sanitizing"
    VALIDATING = "validating"
    TRANSLATING_BACK = "translating-back"
    RESPONDED = "responded"
    ERROR = "error"


_STAGE_ORDER = [
    GatewayStage.RECEIVED,
    GatewayStage.TRANSLATING,
    GatewayStage.CALLING_UPSTREAM,
    GatewayStage.SANITIZING,
    GatewayStage.VALIDATING,
    GatewayStage.TRANSLATING_BACK,
    GatewayStage.RESPONDED,
]


@dataclass
class RequestContext:
    """Identity and bookkeeping of one inbound request."""

    request_id: str
    logical_path: str
    endpoint_key: str
    log: Any
    raw_body: bytes = b""
    start_time: float = field(default_factory=time.monotonic)
    stage: GatewayStage = GatewayStage.RECEIVED

    def advance(self, stage: GatewayStage) -> None:
        """Move to ``stage``.

        Stages only move forward one step at a time; ERROR may be entered from
        any stage before RESPONDED, and RESPONDED is reachable from ERROR once
        the error body is written.
        """
        if self.stage is GatewayStage.RESPONDED:
            raise RuntimeError(f"Request {self.request_id} already responded")
        if stage is GatewayStage.ERROR or (
            self.stage is GatewayStage.ERROR and stage is GatewayStage.RESPONDED
        ):
            self.stage = stage
            return
        if self.stage is GatewayStage.ERROR:
            raise RuntimeError(f"Request {self.request_id} cannot leave error for {stage.value}")
        expected = _STAGE_ORDER[_STAGE_ORDER.index(self.stage) + 1]
        if stage is not expected:
            raise RuntimeError(
                f"Invalid stage transition {self.stage.value} -> {stage.value} "
                f"for request {self.request_id}"
            )
        self.log.debug("Stage transition", stage=stage.value)
        self.stage = stage

    def elapsed_seconds(self) -> float:
        return time.monotonic() - self.start_time


@dataclass
class UpstreamRequest:
    """Canonical chat-completion call about to be sent upstream."""

    path: str
    body: dict[str, Any]


@dataclass
class UpstreamResponse:
    """Raw reply of the upstream call."""

    status_code: int
    text: str
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass
class TimeoutState:
    """Deadline bookkeeping owned by the TimeoutCoordinator.

    ``responded`` flips to True exactly once, through
    ``TimeoutCoordinator.complete``; it never reverts.
    """

    request_id: str
    timeout_seconds: float
    started_at: float
    deadline: float
    cancelled: bool = False
    responded: bool = False
    outcome: asyncio.Future[Any] | None = field(default=None, repr=False)
    timer: asyncio.TimerHandle | None = field(default=None, repr=False)
    upstream: asyncio.Task[Any] | None = field(default=None, repr=False)

    def remaining(self, now: float) -> float:
        return max(0.0, self.deadline - now)

    def elapsed(self, now: float) -> float:
        return now - self.started_at
