"""
TradingRecord: append-only ledger of trades and positions.

Rules only read the record; strategies (or a backtest loop) write it with
enter/exit/operate.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from ..num import Num, NaN, NumFactory, get_num_factory
from ..shared.defaults import DEFAULT_TRADE_AMOUNT
from .position import Position
from .trade import Trade, TradeType

logger = logging.getLogger(__name__)


class TradingRecord:
    """Ordered trades plus closed positions and the current position."""

    def __init__(
        self,
        starting_type: TradeType = TradeType.BUY,
        name: str = "",
        num_factory: Optional[NumFactory] = None,
    ):
        self.starting_type = starting_type
        self.name = name
        self.num_factory = num_factory if num_factory is not None else get_num_factory()
        self.current_position = Position(starting_type)
        self.positions: List[Position] = []
        self.trades: List[Trade] = []
        self._entries: List[Trade] = []
        self._exits: List[Trade] = []

    def operate(self, index: int, price=None, amount=None) -> Trade:
        """
        Enter or exit the current position at index.

        A missing price is recorded as NaN; a missing amount defaults to one.

        Raises:
            ValueError: If index precedes the last recorded trade
        """
        last = self.last_trade()
        if last is not None and index < last.index:
            raise ValueError(
                f"Trade index {index} precedes last trade index {last.index}"
            )
        is_entry = self.current_position.is_new
        trade = self.current_position.operate(
            index, self._to_num(price, NaN), self._to_num(amount, self.num_factory.num_of(DEFAULT_TRADE_AMOUNT))
        )
        self.trades.append(trade)
        (self._entries if is_entry else self._exits).append(trade)
        logger.debug(f"Recorded {trade.type.value} at index {index} ({'entry' if is_entry else 'exit'})")

        if self.current_position.is_closed:
            self.positions.append(self.current_position)
            self.current_position = Position(self.starting_type)
        return trade

    def enter(self, index: int, price=None, amount=None) -> bool:
        """Open a position; False if one is already open."""
        if self.current_position.is_new:
            self.operate(index, price, amount)
            return True
        return False

    def exit(self, index: int, price=None, amount=None) -> bool:
        """Close the open position; False if none is open."""
        if self.current_position.is_opened:
            self.operate(index, price, amount)
            return True
        return False

    def is_closed(self) -> bool:
        return not self.current_position.is_opened

    @property
    def position_count(self) -> int:
        return len(self.positions)

    def last_position(self) -> Optional[Position]:
        return self.positions[-1] if self.positions else None

    def last_trade(self, trade_type: Optional[TradeType] = None) -> Optional[Trade]:
        """Most recent trade, optionally restricted to one direction."""
        for trade in reversed(self.trades):
            if trade_type is None or trade.type is trade_type:
                return trade
        return None

    def last_entry(self) -> Optional[Trade]:
        return self._entries[-1] if self._entries else None

    def last_exit(self) -> Optional[Trade]:
        return self._exits[-1] if self._exits else None

    def _to_num(self, value, default: Num) -> Num:
        if value is None:
            return default
        return self.num_factory.num_of(value)

    def __repr__(self) -> str:
        return (
            f"TradingRecord(name={self.name!r}, starting_type={self.starting_type.name}, "
            f"trades={len(self.trades)})"
        )
