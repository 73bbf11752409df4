from datetime import datetime
from enum import Enum
from typing import Optional

from .models import utcnow


class TimerState(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"
    STOPPED = "stopped"


class InterviewTimer:
    """
    Per-question countdown, advanced by explicit ticks.

    One tick is one elapsed second. The tick that brings the remaining time
    to zero returns True; every later tick is a no-op until the timer is
    started again, so an expiry is reported exactly once.
    """

    def __init__(self):
        self.state = TimerState.STOPPED
        self.remaining = 0
        self.paused_at: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self.state == TimerState.RUNNING

    def start(self, time_limit: int) -> None:
        self.remaining = max(0, int(time_limit))
        self.paused_at = None
        self.state = TimerState.RUNNING if self.remaining > 0 else TimerState.EXPIRED

    def tick(self) -> bool:
        if self.state != TimerState.RUNNING:
            return False
        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self.state = TimerState.EXPIRED
            return True
        return False

    def pause(self, now: Optional[datetime] = None) -> None:
        if self.state == TimerState.RUNNING:
            self.state = TimerState.PAUSED
            self.paused_at = now or utcnow()

    def resume(self) -> None:
        if self.state == TimerState.PAUSED:
            self.state = TimerState.RUNNING
            self.paused_at = None

    def stop(self) -> None:
        self.state = TimerState.STOPPED
        self.paused_at = None

    def restore(self, remaining: int, paused_at: Optional[datetime] = None) -> None:
        """Rebuild the countdown from persisted state; restored timers stay paused."""
        self.remaining = max(0, int(remaining))
        if self.remaining == 0:
            self.state = TimerState.EXPIRED
            self.paused_at = None
        else:
            self.state = TimerState.PAUSED
            self.paused_at = paused_at or utcnow()
