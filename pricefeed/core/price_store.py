"""
PriceStore: an owner-gated, time-ordered, per-symbol latest price store.

Only the latest tick per symbol is retained. A symbol becomes "supported" on its first
accepted push and stays supported for the lifetime of the store.

Push validation order:
    1. caller must be the owner                    -> UnauthorizedError
    2. publish_time must exceed the stored one     -> NonMonotonicTimeError
       (an unsupported symbol counts as stored time 0, so publish_time must be > 0)
    3. publish_time <= clock.now() + tolerance     -> FutureTimeExceedsToleranceError
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from pricefeed.core.clock import Clock, ClockError
from pricefeed.errors.errors import (
    FutureTimeExceedsToleranceError,
    NonMonotonicTimeError,
    UnauthorizedError,
    UnsupportedSymbolError,
)
from pricefeed.ports.telemetry import Telemetry
from pricefeed.types.aliases import Identity, Symbol, UnixSeconds
from pricefeed.types.types import PriceTick, symbol_to_str

logger = logging.getLogger(__name__)

COMPONENT = "price_store"


class PriceStore:
    """
    Single-writer latest-value registry keyed by symbol.

    All operations hold the store lock, so a push is observed either entirely or not at
    all. Reads are open to any caller; writes require the owner identity to be passed
    explicitly as `caller`.
    """

    def __init__(
        self,
        owner: Identity,
        clock: Clock,
        tolerance: UnixSeconds,
        telemetry: Optional[Telemetry] = None,
    ) -> None:
        if not owner:
            raise ValueError("PriceStore: owner must be a non-empty identity")
        if tolerance < 0:
            raise ValueError(f"PriceStore: tolerance must be >= 0, got {tolerance}")

        self._owner = owner
        self._clock = clock
        self._tolerance = int(tolerance)
        self._telemetry = telemetry

        self._prices: dict[Symbol, PriceTick] = {}
        self._lock = threading.RLock()

    # --- properties ---------------------------------------------------------

    @property
    def owner(self) -> Identity:
        return self._owner

    @property
    def tolerance(self) -> UnixSeconds:
        return self._tolerance

    # --- reads --------------------------------------------------------------

    def is_symbol_supported(self, symbol: Symbol) -> bool:
        _check_symbol(symbol)
        with self._lock:
            return symbol in self._prices

    def latest_price(self, symbol: Symbol) -> PriceTick:
        _check_symbol(symbol)
        with self._lock:
            tick = self._prices.get(symbol)
        if tick is None:
            raise UnsupportedSymbolError(
                f"no price published for symbol {symbol_to_str(symbol)!r}",
                symbol=symbol,
                component=COMPONENT,
            )
        return tick

    def current_time(self) -> UnixSeconds:
        """The time the tolerance check compares against."""
        return self._clock.now()

    def symbols(self) -> tuple[Symbol, ...]:
        with self._lock:
            return tuple(self._prices)

    def snapshot(self) -> dict[Symbol, PriceTick]:
        """Copy of the registry; mutating it does not affect the store."""
        with self._lock:
            return dict(self._prices)

    # --- writes -------------------------------------------------------------

    def push_latest_price(
        self,
        symbol: Symbol,
        publish_time: UnixSeconds,
        price: int,
        *,
        caller: Identity,
    ) -> None:
        """
        Replace the latest tick for `symbol` with (publish_time, price).

        Raises UnauthorizedError, NonMonotonicTimeError or FutureTimeExceedsToleranceError;
        a rejected push leaves the store untouched.
        """
        _check_symbol(symbol)
        _check_int("publish_time", publish_time)
        _check_int("price", price)
        with self._lock:
            try:
                self._require_owner(caller)
                self._validate_publish_time(symbol, publish_time)
            except (
                UnauthorizedError,
                NonMonotonicTimeError,
                FutureTimeExceedsToleranceError,
            ) as exc:
                self._log(
                    "price_push_rejected",
                    symbol=symbol_to_str(symbol),
                    publish_time=publish_time,
                    caller=caller,
                    reason=type(exc).__name__,
                )
                raise

            self._prices[symbol] = PriceTick(publish_time=publish_time, price=price)

        logger.debug(
            "price_updated",
            extra={
                "event": "price_updated",
                "symbol": symbol_to_str(symbol),
                "publish_time": publish_time,
                "price": price,
            },
        )
        self._log(
            "price_updated",
            symbol=symbol_to_str(symbol),
            publish_time=publish_time,
            price=price,
        )

    def set_current_time(self, ts: UnixSeconds) -> None:
        """
        Test hook: pin the clock to `ts`. Raises ClockError on realtime clocks.
        """
        if self._clock.is_realtime:
            raise ClockError("set_current_time() is only available with a test clock")
        with self._lock:
            self._clock.set_time(ts)
        self._log("current_time_set", ts=ts)

    def transfer_ownership(self, new_owner: Identity, *, caller: Identity) -> None:
        with self._lock:
            self._require_owner(caller)
            if not new_owner:
                raise ValueError("PriceStore: new owner must be a non-empty identity")
            previous, self._owner = self._owner, new_owner
        logger.info(f"Ownership transferred from {previous} to {new_owner}")
        self._log("ownership_transferred", previous_owner=previous, new_owner=new_owner)

    # --- helpers ------------------------------------------------------------

    def _require_owner(self, caller: Identity) -> None:
        if caller != self._owner:
            raise UnauthorizedError(
                "caller is not the owner",
                caller=caller,
                component=COMPONENT,
            )

    def _validate_publish_time(self, symbol: Symbol, publish_time: UnixSeconds) -> None:
        current = self._prices.get(symbol)
        latest_publish_time = current.publish_time if current is not None else 0
        if publish_time <= latest_publish_time:
            raise NonMonotonicTimeError(
                "publish time must be strictly after the latest published time",
                symbol=symbol,
                publish_time=publish_time,
                latest_publish_time=latest_publish_time,
                component=COMPONENT,
            )

        now = self._clock.now()
        if publish_time > now + self._tolerance:
            raise FutureTimeExceedsToleranceError(
                "publish time is too far in the future",
                symbol=symbol,
                publish_time=publish_time,
                current_time=now,
                tolerance=self._tolerance,
                component=COMPONENT,
            )

    def _log(self, event: str, **fields) -> None:
        if self._telemetry is not None:
            self._telemetry.log(event, component=COMPONENT, **fields)


def _check_symbol(symbol: Symbol) -> None:
    if not isinstance(symbol, bytes):
        raise TypeError(f"symbol must be bytes, got {type(symbol).__name__}")


def _check_int(name: str, value: object) -> None:
    # bool is an int subclass but never a valid time or price
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
