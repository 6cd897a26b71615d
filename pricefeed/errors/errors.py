"""
Custom exceptions for the price feed.

Exception hierarchy:
- PriceFeedError (base)
  - UnauthorizedError: write attempted by someone other than the owner
  - NonMonotonicTimeError: publish time does not move forward
  - FutureTimeExceedsToleranceError: publish time too far ahead of the clock
  - UnsupportedSymbolError: read of a symbol that was never published
  - ConfigurationError: invalid configuration
  - ReplayError: malformed replay input
"""

from __future__ import annotations

from typing import Any, Optional

from pricefeed.types.types import symbol_to_str


class PriceFeedError(Exception):
    """Base exception for all price feed errors."""

    def __init__(
        self,
        message: str,
        *,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.component = component
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.component:
            parts.append(f"[component={self.component}]")
        if self.details:
            parts.append(f"[details={self.details}]")
        return " ".join(parts)


class UnauthorizedError(PriceFeedError):
    """Raised when a caller other than the owner attempts a write."""

    def __init__(
        self,
        message: str,
        *,
        caller: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.caller = caller
        details = details or {}
        if caller is not None:
            details["caller"] = caller
        super().__init__(message, component=component, details=details)


class NonMonotonicTimeError(PriceFeedError):
    """Raised when a pushed publish time is not strictly after the stored one."""

    def __init__(
        self,
        message: str,
        *,
        symbol: Optional[bytes] = None,
        publish_time: Optional[int] = None,
        latest_publish_time: Optional[int] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.symbol = symbol
        self.publish_time = publish_time
        self.latest_publish_time = latest_publish_time
        details = details or {}
        if symbol is not None:
            details["symbol"] = symbol_to_str(symbol)
        if publish_time is not None:
            details["publish_time"] = publish_time
        if latest_publish_time is not None:
            details["latest_publish_time"] = latest_publish_time
        super().__init__(message, component=component, details=details)


class FutureTimeExceedsToleranceError(PriceFeedError):
    """Raised when a publish time lies beyond current time + tolerance."""

    def __init__(
        self,
        message: str,
        *,
        symbol: Optional[bytes] = None,
        publish_time: Optional[int] = None,
        current_time: Optional[int] = None,
        tolerance: Optional[int] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.symbol = symbol
        self.publish_time = publish_time
        self.current_time = current_time
        self.tolerance = tolerance
        details = details or {}
        if symbol is not None:
            details["symbol"] = symbol_to_str(symbol)
        if publish_time is not None:
            details["publish_time"] = publish_time
        if current_time is not None:
            details["current_time"] = current_time
        if tolerance is not None:
            details["tolerance"] = tolerance
        super().__init__(message, component=component, details=details)


class UnsupportedSymbolError(PriceFeedError):
    """Raised when reading a symbol that has no accepted price."""

    def __init__(
        self,
        message: str,
        *,
        symbol: Optional[bytes] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.symbol = symbol
        details = details or {}
        if symbol is not None:
            details["symbol"] = symbol_to_str(symbol)
        super().__init__(message, component=component, details=details)


class ConfigurationError(PriceFeedError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.field = field
        self.value = value
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, component=component, details=details)


class ReplayError(PriceFeedError):
    """Raised when replay input cannot be read or has malformed rows."""

    def __init__(
        self,
        message: str,
        *,
        row: Optional[int] = None,
        column: Optional[str] = None,
        component: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.row = row
        self.column = column
        details = details or {}
        if row is not None:
            details["row"] = row
        if column:
            details["column"] = column
        super().__init__(message, component=component, details=details)
