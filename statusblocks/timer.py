"""Alarm-driven tick counter that decides which blocks are due."""

from __future__ import annotations

import signal
from collections.abc import Iterable

from .util import gcd

TIMER_SIGNAL = signal.SIGALRM


def compute_tick(intervals: Iterable[int]) -> int:
    """Greatest common divisor of all intervals: the alarm period."""
    tick = 0
    for interval in intervals:
        tick = gcd(interval, tick)
    return tick


def compute_reset_value(intervals: Iterable[int]) -> int:
    """Largest interval, and at least 1: the point where time wraps."""
    return max([1, *intervals])


class Timer:
    """Tracks elapsed time in units of the block intervals."""

    def __init__(self, intervals: Iterable[int]) -> None:
        intervals = list(intervals)
        self.tick = compute_tick(intervals)
        self.reset_value = compute_reset_value(intervals)
        # Starting at the reset value makes every block run on the first pass.
        self.time = self.reset_value

    def advance(self) -> None:
        """Move time forward by one tick, wrapping at the reset value."""
        self.time = (self.time + self.tick) % self.reset_value

    def arm(self) -> None:
        """Schedule the next SIGALRM and advance the clock."""
        signal.alarm(self.tick)
        self.advance()

    def must_run(self, interval: int) -> bool:
        """Whether a block with this interval is due at the current time."""
        if self.time == self.reset_value:
            return True
        if interval == 0:
            return False
        return self.time % interval == 0