from __future__ import annotations

import logging
from typing import Optional

from pricefeed.config.configs import PriceFeedConfig
from pricefeed.core.clock import Clock, RealtimeClock, SimClock
from pricefeed.core.price_store import PriceStore
from pricefeed.ports.telemetry import Telemetry

logger = logging.getLogger(__name__)


def build_clock(config: PriceFeedConfig) -> Clock:
    """SimClock in test mode (settable), RealtimeClock otherwise."""
    if config.test_mode:
        return SimClock(start_s=config.start_time or 0)
    return RealtimeClock()


def build_store(
    config: PriceFeedConfig,
    *,
    clock: Optional[Clock] = None,
    telemetry: Optional[Telemetry] = None,
) -> PriceStore:
    clock = clock if clock is not None else build_clock(config)
    logger.debug(
        "price_store_built",
        extra={
            "event": "price_store_built",
            "owner": config.owner,
            "tolerance": config.tolerance,
            "realtime": clock.is_realtime,
        },
    )
    return PriceStore(
        owner=config.owner,
        clock=clock,
        tolerance=config.tolerance,
        telemetry=telemetry,
    )
