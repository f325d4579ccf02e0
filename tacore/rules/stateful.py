"""
Rules that depend on call history or on the trade ledger.
"""
from typing import Optional

from .base import CompositeRule, Rule
from .boolean import BooleanRule
from ..trading import TradeType


class JustOnceRule(CompositeRule):
    """
    Satisfied only once.

    Fires on the first call (in call order, not index order) where the inner
    rule is satisfied; every later call returns False whatever the index.
    """

    TYPE_NAME = "JustOnceRule"

    def __init__(self, rule: Optional[Rule] = None):
        super().__init__(rule if rule is not None else BooleanRule.TRUE)
        self._satisfied = False

    @property
    def rule(self) -> Rule:
        return self.components[0]

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        if self._satisfied:
            return self.trace(index, False)
        if self.rule.is_satisfied(index, trading_record):
            self._satisfied = True
            return self.trace(index, True)
        return self.trace(index, False)


class WaitForRule(Rule):
    """
    At least `bar_count` bars have passed since the last trade of a type.

    Only trades at or before index count; False without a record or trade.
    """

    TYPE_NAME = "WaitForRule"

    def __init__(self, trade_type: TradeType, bar_count: int):
        if not isinstance(trade_type, TradeType):
            raise ValueError(f"trade_type must be a TradeType, got {trade_type!r}")
        if bar_count < 0:
            raise ValueError(f"bar_count must be >= 0, got {bar_count}")
        super().__init__()
        self.trade_type = trade_type
        self.bar_count = bar_count

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        if trading_record is None:
            return self.trace(index, False)
        last = None
        for trade in reversed(trading_record.trades):
            if trade.type is self.trade_type and trade.index <= index:
                last = trade
                break
        if last is None:
            return self.trace(index, False)
        return self.trace(index, index - last.index >= self.bar_count)
