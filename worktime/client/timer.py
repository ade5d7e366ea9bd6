"""Stopwatch that measures a work session.

Idle -> Running -> Idle; there is no pause. Elapsed time is a counter that
the ticker bumps once per interval, so it reads exactly N after N ticks. A
suspended event loop delays ticks rather than replaying them later.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from ..core.config import settings

logger = logging.getLogger(__name__)

Validator = Callable[[], Mapping[str, str]]
CompletionHandler = Callable[[int], Union[Awaitable[Any], Any]]


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


def progress(elapsed_seconds: int, goal_seconds: int) -> float:
    """Fraction of the goal reached, capped at 1.0. No goal means 0."""
    if goal_seconds <= 0:
        return 0.0
    return min(elapsed_seconds / goal_seconds, 1.0)


def format_elapsed(seconds: int) -> str:
    seconds = max(int(seconds), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class AsyncioTicker:
    """Calls ``callback`` every ``interval`` seconds on the running loop."""

    def __init__(self, interval: float | None = None) -> None:
        self.interval = interval if interval is not None else settings.TIMER_INTERVAL_SECONDS
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, callback: Callable[[], None]) -> None:
        self.stop()
        self._task = asyncio.get_running_loop().create_task(self._run(callback))

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self, callback: Callable[[], None]) -> None:
        while True:
            await asyncio.sleep(self.interval)
            callback()


class TimerController:
    def __init__(
        self,
        *,
        validator: Optional[Validator] = None,
        on_complete: Optional[CompletionHandler] = None,
        on_reset: Optional[Callable[[], None]] = None,
        ticker: Optional[AsyncioTicker] = None,
    ) -> None:
        self._validator = validator
        self._on_complete = on_complete
        self._on_reset = on_reset
        self._ticker = ticker
        self.state = TimerState.IDLE
        self.elapsed_seconds = 0
        self.goal_seconds = 0
        self.run_id = 0
        self.errors: dict[str, str] = {}

    @property
    def is_running(self) -> bool:
        return self.state is TimerState.RUNNING

    @property
    def progress(self) -> float:
        return progress(self.elapsed_seconds, self.goal_seconds)

    @property
    def display(self) -> str:
        return format_elapsed(self.elapsed_seconds)

    def set_goal(self, seconds: int) -> None:
        if seconds < 0:
            raise ValueError("goal_seconds must be >= 0")
        self.goal_seconds = int(seconds)

    def start(self) -> dict[str, str]:
        """Enter Running if the validator accepts; otherwise return its errors."""
        if self.is_running:
            return {}
        errors = dict(self._validator()) if self._validator is not None else {}
        self.errors = errors
        if errors:
            logger.info("timer.start_rejected", extra={"extra_data": {"fields": sorted(errors)}})
            return errors
        self.run_id += 1
        self.state = TimerState.RUNNING
        if self._ticker is not None:
            self._ticker.start(self.tick)
        logger.info("timer.start", extra={"extra_data": {"goal_seconds": self.goal_seconds}})
        return {}

    def tick(self) -> None:
        # A tick can land after stop() if it was already queued.
        if not self.is_running:
            return
        self.elapsed_seconds += 1

    async def stop(self) -> Any:
        """Freeze, go Idle, hand the duration to ``on_complete`` and clear it.

        Returns whatever the completion handler produced, or ``None`` when the
        timer was not running.
        """
        if not self.is_running:
            return None
        self._halt()
        duration = self.elapsed_seconds
        logger.info("timer.stop", extra={"extra_data": {"elapsed_seconds": duration}})
        result = self._on_complete(duration) if self._on_complete is not None else None
        self.elapsed_seconds = 0
        if inspect.isawaitable(result):
            result = await result
        return result

    def force_idle(self, run_id: int | None = None) -> None:
        """Go Idle and clear elapsed, unless ``run_id`` names a run that already ended."""
        if run_id is not None and run_id != self.run_id:
            return
        self._halt()
        self.elapsed_seconds = 0

    def reset(self) -> None:
        self._halt()
        self.elapsed_seconds = 0
        self.goal_seconds = 0
        self.errors = {}
        if self._on_reset is not None:
            self._on_reset()
        logger.info("timer.reset")

    def _halt(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()
        self.state = TimerState.IDLE
