"""Clock Port Interface.

Contract: Provides the current UTC time, in epoch seconds, used for the
future-time tolerance check of a price push.
"""

from __future__ import annotations

from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        """Return current UTC time as epoch seconds."""
        ...
