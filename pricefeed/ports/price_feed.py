"""PriceFeed Port Interface.

Contract: Read-only view of a price feed. Consumers depend on this port only;
writing prices is a concern of the concrete store and its owner.
"""

from __future__ import annotations

from typing import Protocol

from pricefeed.types.types import PriceTick


class PriceFeed(Protocol):
    def is_symbol_supported(self, symbol: bytes) -> bool:
        """True iff at least one price was accepted for `symbol`."""
        ...

    def latest_price(self, symbol: bytes) -> PriceTick:
        """Latest accepted tick for `symbol`; raises UnsupportedSymbolError otherwise."""
        ...
