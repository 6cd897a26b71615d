"""Telemetry Port Interface.

Contract: Log structured events (price updates, rejected pushes, config resolution).
"""

from __future__ import annotations

from typing import Any, Protocol


class Telemetry(Protocol):
    def log(self, event: str, **fields: Any) -> None: ...
