"""
Trade types and the Trade value.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..num import Num


class TradeType(Enum):
    """Direction of a trade."""
    BUY = "buy"
    SELL = "sell"

    def complement(self) -> "TradeType":
        """Opposite direction (BUY <-> SELL)."""
        return TradeType.SELL if self is TradeType.BUY else TradeType.BUY


@dataclass(frozen=True)
class Trade:
    """A single order fill at a bar index."""
    index: int
    type: TradeType
    price_per_asset: Num  # NaN when the price is unknown
    amount: Num

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"Trade index must be >= 0, got {self.index}")

    @property
    def is_buy(self) -> bool:
        return self.type is TradeType.BUY

    @property
    def is_sell(self) -> bool:
        return self.type is TradeType.SELL

    @property
    def value(self) -> Num:
        """price_per_asset * amount."""
        return self.price_per_asset * self.amount
