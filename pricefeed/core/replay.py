"""
Replay a batch of pushes against a PriceStore.

Each record is applied in order. Rejections (PriceFeedError raised by the store) are
collected into the report; anything else propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from pricefeed.core.price_store import PriceStore
from pricefeed.errors.errors import (
    FutureTimeExceedsToleranceError,
    NonMonotonicTimeError,
    PriceFeedError,
    UnauthorizedError,
)
from pricefeed.types.aliases import Identity
from pricefeed.types.types import PushRecord, RejectReason, symbol_to_str

logger = logging.getLogger(__name__)

_REASONS: dict[type[PriceFeedError], RejectReason] = {
    UnauthorizedError: RejectReason.UNAUTHORIZED,
    NonMonotonicTimeError: RejectReason.NON_MONOTONIC_TIME,
    FutureTimeExceedsToleranceError: RejectReason.FUTURE_TIME_EXCEEDS_TOLERANCE,
}


@dataclass(frozen=True, slots=True)
class Rejection:
    row: int
    symbol: str
    reason: RejectReason
    message: str


@dataclass(slots=True)
class ReplayReport:
    accepted: int = 0
    rejections: list[Rejection] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.accepted + len(self.rejections)

    @property
    def all_accepted(self) -> bool:
        return not self.rejections


def replay(
    store: PriceStore,
    records: Iterable[PushRecord],
    *,
    default_caller: Identity,
) -> ReplayReport:
    """
    Apply `records` to `store`. A record without a caller pushes as `default_caller`;
    a record with `now` pins the store clock first (requires a test clock).
    """
    report = ReplayReport()
    for record in records:
        if record.now is not None:
            store.set_current_time(record.now)

        caller = record.caller if record.caller is not None else default_caller
        try:
            store.push_latest_price(
                record.symbol, record.publish_time, record.price, caller=caller
            )
        except PriceFeedError as exc:
            reason = _REASONS.get(type(exc))
            if reason is None:
                raise
            report.rejections.append(
                Rejection(
                    row=record.row,
                    symbol=symbol_to_str(record.symbol),
                    reason=reason,
                    message=str(exc),
                )
            )
            logger.warning(f"Row {record.row} rejected: {reason.value}")
            continue
        report.accepted += 1

    logger.info(f"Replay finished: {report.accepted}/{report.total} pushes accepted")
    return report
