"""
Manual Price Feed.

An owner-gated store of the latest price per symbol. The owner pushes
(publish_time, price) ticks; anyone can read them back.

Components:
- PriceStore: registry of latest ticks with owner, ordering and tolerance checks
- Clock / RealtimeClock / SimClock: injectable time sources
- PriceFeedConfig / ConfigLoader: layered, validated configuration
- JsonlTelemetry: structured event sink
- load_pushes / replay: batch application of recorded pushes

Usage:
    from pricefeed import PriceStore, SimClock, symbol_from_str

    store = PriceStore(owner="0xowner", clock=SimClock(1000), tolerance=900)
    store.push_latest_price(symbol_from_str("BTCUSD"), 100, 500, caller="0xowner")
    store.latest_price(symbol_from_str("BTCUSD"))  # PriceTick(publish_time=100, price=500)
"""

from pricefeed.config.configs import PriceFeedConfig
from pricefeed.core.clock import Clock, ClockError, RealtimeClock, SimClock
from pricefeed.core.factory import build_store
from pricefeed.core.price_store import PriceStore
from pricefeed.errors.errors import (
    ConfigurationError,
    FutureTimeExceedsToleranceError,
    NonMonotonicTimeError,
    PriceFeedError,
    ReplayError,
    UnauthorizedError,
    UnsupportedSymbolError,
)
from pricefeed.types.types import PriceTick, symbol_from_str, symbol_to_str

__all__ = [
    # Main entry point
    "PriceStore",
    "build_store",
    "PriceFeedConfig",
    # Time
    "Clock",
    "ClockError",
    "RealtimeClock",
    "SimClock",
    # Types
    "PriceTick",
    "symbol_from_str",
    "symbol_to_str",
    # Errors
    "PriceFeedError",
    "UnauthorizedError",
    "NonMonotonicTimeError",
    "FutureTimeExceedsToleranceError",
    "UnsupportedSymbolError",
    "ConfigurationError",
    "ReplayError",
]
