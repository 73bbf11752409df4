import asyncio
from typing import Optional

import structlog

from .interview_session import InterviewFlow

logger = structlog.get_logger(__name__)


class TimerScheduler:
    """Ticks the interview flow once per interval on the running event loop."""

    def __init__(self, flow: InterviewFlow, interval: float = 1.0):
        self.flow = flow
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.debug("timer_scheduler_started", interval=self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.debug("timer_scheduler_stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.flow.tick()
            except Exception:
                logger.exception("timer_tick_failed")
