"""
Debounce timer modelled as an explicit state machine.

The timer never schedules anything itself: callers pass in the current time
when arming and polling, so the same object works from a frame loop, an
asyncio task or a test with a fake clock.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TimerState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"


@dataclass
class Debouncer:
    """
    Quiescence timer with idle / armed(deadline) states.

    Attributes:
        window_s: Quiet period required before the timer fires, in seconds
    """
    window_s: float = 0.1
    state: TimerState = TimerState.IDLE
    deadline: Optional[float] = None

    @property
    def armed(self) -> bool:
        return self.state is TimerState.ARMED

    def arm(self, now: float) -> None:
        """(Re)arm the timer; any pending deadline is replaced by now + window."""
        self.state = TimerState.ARMED
        self.deadline = now + self.window_s

    def cancel(self) -> None:
        """Return to idle without firing."""
        self.state = TimerState.IDLE
        self.deadline = None

    def poll(self, now: float) -> bool:
        """
        Check the timer.

        Returns:
            True exactly once when an armed timer reaches its deadline
        """
        if self.state is not TimerState.ARMED or now < self.deadline:
            return False
        self.cancel()
        return True

    def remaining(self, now: float) -> Optional[float]:
        """Seconds until the deadline, or None when idle."""
        if not self.armed:
            return None
        return max(0.0, self.deadline - now)
