"""
Strategy: an entry rule and an exit rule with an unstable warm-up period.
"""
from typing import Optional

from .base import Rule
from ..shared.defaults import UNSTABLE_BARS
from ..trading import TradingRecord


class BaseStrategy:
    """
    Pairs an entry rule with an exit rule.

    No signal is produced for indices below unstable_bars, where the
    indicators behind the rules have not settled yet.
    """

    def __init__(
        self,
        entry_rule: Rule,
        exit_rule: Rule,
        unstable_bars: int = UNSTABLE_BARS,
        name: Optional[str] = None,
    ):
        if entry_rule is None or exit_rule is None:
            raise ValueError("Strategy requires both an entry rule and an exit rule")
        if unstable_bars < 0:
            raise ValueError(f"unstable_bars must be >= 0, got {unstable_bars}")
        self.entry_rule = entry_rule
        self.exit_rule = exit_rule
        self.unstable_bars = unstable_bars
        self.name = name

    def is_unstable_at(self, index: int) -> bool:
        return index < self.unstable_bars

    def should_enter(self, index: int, trading_record: Optional[TradingRecord] = None) -> bool:
        if self.is_unstable_at(index):
            return False
        return self.entry_rule.is_satisfied(index, trading_record)

    def should_exit(self, index: int, trading_record: Optional[TradingRecord] = None) -> bool:
        if self.is_unstable_at(index):
            return False
        return self.exit_rule.is_satisfied(index, trading_record)

    def should_operate(self, index: int, trading_record: TradingRecord) -> bool:
        """Enter when flat, exit when a position is open."""
        position = trading_record.current_position
        if position.is_new:
            return self.should_enter(index, trading_record)
        if position.is_opened:
            return self.should_exit(index, trading_record)
        return False

    def __repr__(self) -> str:
        label = self.name or type(self).__name__
        return f"{label}(entry={self.entry_rule.name}, exit={self.exit_rule.name}, unstable_bars={self.unstable_bars})"
