"""
now() provides the canonical notion of time for the price store. The store only ever
asks the clock for the current time when validating the future-time tolerance of a push.
 - RealtimeClock is used by live deployments, it can never be overridden.
 - SimClock is used by tests and replays, where time is driven explicitly (set_time()
   is the setCurrentTime hook of a testable deployment).
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Final, Optional

# type alias (at runtime equivalent to int)
Seconds = int  # Seconds since epoch

# -------- Exceptions -----------------------------------------------------------


class ClockError(RuntimeError):
    """Custom runtime error, raised when a clock operation would violate its invariants
    (e.g., going backward, or overriding a realtime clock).
    """


# -------- Utilities (duration parsing) -----------------------------------------

_TIME_UNITS_S: Final[dict[str, int]] = {
    "s": 1,
    "m": 60,
    "h": 3_600,
    "d": 86_400,
}


def parse_duration(value: str) -> Seconds:
    """
    Parse duration strings like '900s', '15m', '1h', '1d' into seconds.
    Bare digits are read as seconds. Zero is allowed (no lead time at all).

    Raises ValueError on unknown units, empty quantities, non-digits or negative values.
    """
    text = value.strip().lower()
    if text.isdigit():
        return int(text)

    for unit, factor in _TIME_UNITS_S.items():
        if text.endswith(unit):
            prefix = text[: -len(unit)].strip()
            if not prefix or not prefix.isdigit():
                raise ValueError(f"clock.parse_duration(): quantity missing or not digit: {value!r}")
            return int(prefix) * factor
    raise ValueError(f"clock.parse_duration(): invalid duration: {value!r}")


# -------- Interface -----------------------------------------------------------


class Clock(ABC):
    """
    Time source interface for the price store.

    All timestamps are UTC epoch seconds (int), the same unit as a PriceTick's publish_time.
    """

    @abstractmethod
    def now(self) -> Seconds:
        """Current time in UTC epoch seconds."""
        raise NotImplementedError

    def set_time(self, ts_s: Seconds) -> None:
        """
        Override the current time. Only test clocks support this.
        """
        raise ClockError(f"{type(self).__name__} does not support set_time()")

    @property
    @abstractmethod
    def is_realtime(self) -> bool:
        """True for RealtimeClock; False for SimClock."""
        raise NotImplementedError


# -------- RealtimeClock -------------------------------------------------------


@dataclass
class RealtimeClock(Clock):
    """
    Realtime clock that is robust to system time changes.

    It anchors to the wall-clock at construction and then advances using
    time.monotonic(). This makes `now()` non-decreasing even if the OS clock
    is adjusted by NTP or manual tinkering.

    _t0_wall_s: The wall-clock time at the start (in seconds).
    _t0_mono: The monotonic counter. time.monotonic captures the elapsed time since start.
    """

    _t0_wall_s: Optional[float] = None
    _t0_mono: Optional[float] = None

    def __post_init__(self) -> None:
        self._t0_wall_s = time.time()  # time since Unix Epoch (UTC)
        self._t0_mono = time.monotonic()

    @property
    def is_realtime(self) -> bool:
        return True

    def now(self) -> Seconds:
        if self._t0_wall_s is None or self._t0_mono is None:
            raise ClockError("Clock not properly initialized")
        elapsed = time.monotonic() - self._t0_mono
        return int(self._t0_wall_s + elapsed)


# -------- SimClock ------------------------------------------------------------


class SimClock(Clock):
    """
    Deterministic, manually-driven clock for tests and replays.

    advance_to() / advance_by() only move forward. set_time() is an unrestricted
    override, used to pin "now" to an arbitrary value before exercising the
    tolerance window.
    """

    def __init__(self, start_s: Seconds = 0):
        if start_s < 0:
            raise ValueError("start_s must be >= 0")
        self.start_s: Seconds = int(start_s)
        self._current_s: Seconds = int(start_s)

    @property
    def is_realtime(self) -> bool:
        return False

    def now(self) -> Seconds:
        return self._current_s

    def set_time(self, ts_s: Seconds) -> None:
        if ts_s < 0:
            raise ValueError(f"SimClock: time must be >= 0, got {ts_s}")
        self._current_s = int(ts_s)

    def advance_to(self, ts_s: Seconds) -> Seconds:
        """
        Move the simulated time forward to exactly ts_s.

        Returns the new current time. Raises ClockError on backward moves.
        """
        if ts_s < self.now():
            raise ClockError(f"SimClock: cannot go backwards: {ts_s} < {self.now()}")
        self._current_s = int(ts_s)
        return self._current_s

    def advance_by(self, delta_s: Seconds) -> Seconds:
        """
        Move the simulated time forward by delta_s (>= 0).
        """
        if delta_s < 0:
            raise ClockError(f"SimClock: cannot go backwards, delta_s < 0: {delta_s}")
        return self.advance_to(self.now() + int(delta_s))
