from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pricefeed.types.aliases import Identity, Symbol, UnixSeconds


class RejectReason(str, Enum):
    """Why a push was refused (mirrors the PriceFeedError subclasses)."""

    UNAUTHORIZED = "unauthorized"
    NON_MONOTONIC_TIME = "non_monotonic_time"
    FUTURE_TIME_EXCEEDS_TOLERANCE = "future_time_exceeds_tolerance"


@dataclass(frozen=True, slots=True)
class PriceTick:
    """Single observation: when it was published and at what price."""

    publish_time: UnixSeconds
    price: int


@dataclass(frozen=True, slots=True)
class PushRecord:
    """One row of replay input."""

    row: int
    symbol: Symbol
    publish_time: UnixSeconds
    price: int
    caller: Identity | None = None
    now: UnixSeconds | None = None


def symbol_from_str(text: str) -> Symbol:
    """Encode a human readable symbol name the way on-chain callers do (UTF-8 bytes)."""
    if not isinstance(text, str):
        raise TypeError(f"symbol_from_str expects str, got {type(text).__name__}")
    return text.encode("utf-8")


def symbol_to_str(symbol: Symbol) -> str:
    """Inverse of symbol_from_str; falls back to 0x-hex for non UTF-8 bytes."""
    try:
        return symbol.decode("utf-8")
    except UnicodeDecodeError:
        return "0x" + symbol.hex()
