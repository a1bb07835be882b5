"""Fetch controller: at most one request in flight, observed by polling.

``start`` dispatches the request as a background asyncio task and returns
immediately. The task hands its outcome to a per-request single-slot channel.
The foreground calls ``poll`` once per tick; it never awaits the task.

Replacing the in-flight request drops the old channel, so a late completion of
an earlier request has nowhere to land and can never overwrite a newer result.
Abandoned tasks are not cancelled: they run to completion and their outcome is
discarded.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from webprobe.errors import ErrorCode, ProbeError

if TYPE_CHECKING:
    from collections.abc import Callable

    from webprobe.models.http import FetchOutcome, ProbeRequest
    from webprobe.protocols import HttpClientProtocol

log = structlog.get_logger()


class SingleSlotChannel:
    """Carries at most one outcome from one producer to one consumer."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[FetchOutcome] = asyncio.Queue(maxsize=1)

    def send(self, outcome: FetchOutcome) -> None:
        # Raises asyncio.QueueFull on a second send
        self._queue.put_nowait(outcome)

    def try_receive(self) -> FetchOutcome | None:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None


@dataclass
class _InFlight:
    request: ProbeRequest
    channel: SingleSlotChannel
    task: asyncio.Task[None]


class FetchController:
    """Owns the single outstanding request and exposes ``start``/``poll``/``is_busy``."""

    def __init__(
        self,
        client: HttpClientProtocol,
        *,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self._client = client
        self._on_complete = on_complete
        self._in_flight: _InFlight | None = None
        # Strong references to running tasks, including abandoned ones, so the
        # event loop does not garbage-collect them mid-request.
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def is_busy(self) -> bool:
        return self._in_flight is not None

    def start(self, request: ProbeRequest) -> None:
        """Dispatch ``request`` in the background. Must be called from the running loop.

        An outstanding request is abandoned, not cancelled: its task finishes
        on its own and its outcome is never observed.
        """
        if self._in_flight is not None:
            log.info("fetch_abandoned", url=self._in_flight.request.url)

        channel = SingleSlotChannel()
        task = asyncio.get_running_loop().create_task(self._run(request, channel))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        self._in_flight = _InFlight(request=request, channel=channel, task=task)
        log.info("fetch_started", url=request.url, method=request.method.value)

    def poll(self) -> FetchOutcome | None:
        """Return the outcome of the in-flight request if it is ready, else ``None``."""
        in_flight = self._in_flight
        if in_flight is None:
            return None

        outcome = in_flight.channel.try_receive()
        if outcome is None:
            if not in_flight.task.done():
                return None
            # The task ended without sending: it raised or was cancelled.
            outcome = ProbeError(
                code=ErrorCode.ABORTED,
                message=f"Request to {in_flight.request.url} ended without a result",
                suggestion="Trigger the request again.",
                recoverable=True,
            )
            log.warning("fetch_aborted", url=in_flight.request.url)

        self._in_flight = None
        return outcome

    async def _run(self, request: ProbeRequest, channel: SingleSlotChannel) -> None:
        outcome = await self._client.perform(request)
        channel.send(outcome)
        if self._on_complete is not None:
            self._on_complete()

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("fetch_task_crashed", exc_info=exc)
