"""
Position: a pair of trades (entry, then exit in the opposite direction).
"""
from __future__ import annotations

from typing import Optional

from ..num import Num, NaN
from .trade import Trade, TradeType


class Position:
    """
    Entry/exit pair.

    A position is new (no trades), opened (entry only) or closed (entry and
    exit). The exit always has the complement type of the entry.
    """

    def __init__(self, starting_type: TradeType = TradeType.BUY):
        self.starting_type = starting_type
        self.entry: Optional[Trade] = None
        self.exit: Optional[Trade] = None

    @property
    def is_new(self) -> bool:
        return self.entry is None and self.exit is None

    @property
    def is_opened(self) -> bool:
        return self.entry is not None and self.exit is None

    @property
    def is_closed(self) -> bool:
        return self.entry is not None and self.exit is not None

    def operate(self, index: int, price: Num = NaN, amount: Num = NaN) -> Optional[Trade]:
        """
        Record the next trade of this position.

        Returns:
            The new trade, or None if the position is already closed

        Raises:
            ValueError: If the exit index precedes the entry index
        """
        if self.is_new:
            self.entry = Trade(index, self.starting_type, price, amount)
            return self.entry
        if self.is_opened:
            if index < self.entry.index:
                raise ValueError(
                    f"Exit index {index} is before entry index {self.entry.index}"
                )
            self.exit = Trade(index, self.starting_type.complement(), price, amount)
            return self.exit
        return None

    def gross_profit(self, final_price: Optional[Num] = None) -> Num:
        """
        Gross profit of the position.

        For an open position, final_price is used as exit price. Profits of a
        long position are losses of a short one.
        """
        if self.is_new:
            return NaN
        if self.is_closed:
            profit = self.exit.value - self.entry.value
        else:
            if final_price is None:
                return NaN
            profit = self.entry.amount * final_price - self.entry.value
        return -profit if self.entry.is_sell else profit

    def gross_return(self, final_price: Optional[Num] = None) -> Num:
        """Exit price over entry price, base included (1.04 for +4%); inverted for short positions."""
        if self.is_new:
            return NaN
        exit_price = self.exit.price_per_asset if self.is_closed else final_price
        if exit_price is None:
            return NaN
        ratio = exit_price / self.entry.price_per_asset
        if self.entry.is_buy:
            return ratio
        return 2 - ratio

    def __eq__(self, other):
        if not isinstance(other, Position):
            return NotImplemented
        return self.entry == other.entry and self.exit == other.exit

    def __hash__(self):
        return hash((self.entry, self.exit))

    def __repr__(self) -> str:
        return f"Position(entry={self.entry!r}, exit={self.exit!r})"
