import logging

import pytest

from pricefeed.core.clock import SimClock
from pricefeed.core.price_store import PriceStore

OWNER = "0xowner"
RANDO = "0xrando"
TOLERANCE = 900


@pytest.fixture
def owner() -> str:
    return OWNER


@pytest.fixture
def rando() -> str:
    return RANDO


@pytest.fixture
def sim_clock() -> SimClock:
    return SimClock(start_s=0)


@pytest.fixture
def store(sim_clock: SimClock) -> PriceStore:
    """A freshly deployed store with a settable clock pinned at t=0."""
    return PriceStore(owner=OWNER, clock=sim_clock, tolerance=TOLERANCE)


class RecordingTelemetry:
    """In-memory Telemetry port implementation."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def log(self, event: str, **fields) -> None:
        self.events.append((event, fields))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()


@pytest.fixture(autouse=True)
def reset_logging_handlers():
    # Keep test logging deterministic and avoid leaking handlers between tests.
    logging.getLogger("pricefeed").handlers = []
