"""
Stop-loss and stop-gain rules.

All variants share one evaluation engine (StopRule) and differ only in how
the price offset is measured:
- percentage of the reference price
- fixed amount
- multiple of an indicator value (ATR or standard deviation)

Direction comes from the entry trade of the open position:
- loss fires when price <= reference - offset (BUY) or >= reference + offset (SELL)
- gain fires when price >= reference + offset (BUY) or <= reference - offset (SELL)

Non-trailing rules use the entry price as reference. Trailing rules use the
most favorable price seen since entry (highest for BUY, lowest for SELL);
that extreme resets on every new position and never retreats. The reference
at bar i covers bars up to i only, whatever order bars are evaluated in.
A trailing gain fires when price has retraced by the offset from the
extreme while the position is still in profit.

Every rule returns False without a trading record or an open position.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from .base import Rule
from ..indicators import (
    ATRIndicator,
    ClosePriceIndicator,
    Indicator,
    StandardDeviationIndicator,
)
from ..num import Num
from ..series import BarSeries
from ..shared.defaults import ATR_BAR_COUNT, VOLATILITY_BAR_COUNT
from ..trading import Trade


class StopOffset(ABC):
    """Distance between the reference price and the stop level."""

    @abstractmethod
    def offset(self, reference: Num, index: int) -> Num:
        pass


class PercentageOffset(StopOffset):
    def __init__(self, percentage: Num):
        self.percentage = percentage

    def offset(self, reference: Num, index: int) -> Num:
        return reference * self.percentage / 100


class FixedOffset(StopOffset):
    def __init__(self, amount: Num):
        self.amount = amount

    def offset(self, reference: Num, index: int) -> Num:
        return self.amount


class IndicatorOffset(StopOffset):
    """coefficient * indicator value at the evaluated index."""

    def __init__(self, indicator: Indicator, coefficient: Num):
        self.indicator = indicator
        self.coefficient = coefficient

    def offset(self, reference: Num, index: int) -> Num:
        return self.indicator.get_value(index) * self.coefficient


def _positive(name: str, value, indicator: Indicator) -> Num:
    if indicator is None:
        raise ValueError("Stop rules require a price indicator")
    value = indicator.num_of(value)
    if value.is_nan() or not value.is_positive():
        raise ValueError(f"{name} must be positive, got {value}")
    return value


class StopRule(Rule):
    """
    Shared stop evaluation.

    Subclasses set GAIN (target instead of stop) and TRAILING (favorable
    extreme instead of entry price as reference).
    """

    GAIN = False
    TRAILING = False

    def __init__(self, price_indicator: Indicator, offset: StopOffset):
        if price_indicator is None:
            raise ValueError(f"{self.TYPE_NAME} requires a price indicator")
        super().__init__()
        self.price_indicator = price_indicator
        self.stop_offset = offset
        self._entry: Optional[Trade] = None
        # _extremes[k]: most favorable price over bars [entry.index, entry.index + k]
        self._extremes: List[Optional[Num]] = []

    @property
    def trailing_reference(self) -> Optional[Num]:
        """Most favorable price up to the furthest bar evaluated for the tracked position (trailing rules only)."""
        return self._extremes[-1] if self._extremes else None

    def _entry_price(self, entry: Trade) -> Num:
        if entry.price_per_asset.is_nan():
            return self.price_indicator.get_value(entry.index)
        return self.price_indicator.num_of(entry.price_per_asset)

    def _reference_at(self, entry: Trade, index: int) -> Optional[Num]:
        """Most favorable price over bars [entry.index, index]."""
        if self._entry is not entry:
            self._entry = entry
            self._extremes = []
        extremes = self._extremes
        while len(extremes) <= index - entry.index:
            if extremes:
                extreme = extremes[-1]
            else:
                seed = self.price_indicator.num_of(entry.price_per_asset)
                extreme = None if seed.is_nan() else seed
            price = self.price_indicator.get_value(entry.index + len(extremes))
            if not price.is_nan():
                if extreme is None:
                    extreme = price
                elif entry.is_buy:
                    extreme = extreme.max(price)
                else:
                    extreme = extreme.min(price)
            extremes.append(extreme)
        return extremes[index - entry.index]

    def _open_entry(self, index: int, trading_record) -> Optional[Trade]:
        if trading_record is None:
            return None
        position = trading_record.current_position
        if not position.is_opened or position.entry.index > index:
            return None
        return position.entry

    def stop_price(self, index: int, trading_record) -> Optional[Num]:
        """
        Price level at which the rule fires for the open position.

        Returns:
            Stop (loss) or target (gain) price, None without an open position
        """
        entry = self._open_entry(index, trading_record)
        if entry is None:
            return None
        return self._level(entry, index)

    def _level(self, entry: Trade, index: int) -> Optional[Num]:
        reference = self._reference_at(entry, index) if self.TRAILING else self._entry_price(entry)
        if reference is None or reference.is_nan():
            return None
        offset = self.stop_offset.offset(reference, index)
        # Trailing gains retrace from the extreme like a loss does.
        moves_with_position = self.GAIN and not self.TRAILING
        if entry.is_buy == moves_with_position:
            return reference + offset
        return reference - offset

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        entry = self._open_entry(index, trading_record)
        if entry is None:
            return self.trace(index, False)
        level = self._level(entry, index)
        price = self.price_indicator.get_value(index)
        if level is None or level.is_nan() or price.is_nan():
            return self.trace(index, False)

        if self.GAIN and not self.TRAILING:
            satisfied = price >= level if entry.is_buy else price <= level
        else:
            satisfied = price <= level if entry.is_buy else price >= level
            if self.GAIN:
                entry_price = self._entry_price(entry)
                satisfied = satisfied and (price > entry_price if entry.is_buy else price < entry_price)
        return self.trace(index, satisfied, f"price={price}, level={level}")


# --- Percentage ---

class _PercentageStopRule(StopRule):
    def __init__(self, price_indicator: Indicator, percentage):
        self.percentage = _positive("Percentage", percentage, price_indicator)
        super().__init__(price_indicator, PercentageOffset(self.percentage))


class StopLossRule(_PercentageStopRule):
    """Price fell (BUY) or rose (SELL) by percentage from the entry price."""
    TYPE_NAME = "StopLossRule"


class StopGainRule(_PercentageStopRule):
    """Price rose (BUY) or fell (SELL) by percentage from the entry price."""
    TYPE_NAME = "StopGainRule"
    GAIN = True


class TrailingStopLossRule(_PercentageStopRule):
    """Price moved against the position by percentage from the best price since entry."""
    TYPE_NAME = "TrailingStopLossRule"
    TRAILING = True


class TrailingStopGainRule(_PercentageStopRule):
    """Price retraced by percentage from the best price since entry, still in profit."""
    TYPE_NAME = "TrailingStopGainRule"
    GAIN = True
    TRAILING = True


# --- Fixed amount ---

class _FixedAmountStopRule(StopRule):
    def __init__(self, price_indicator: Indicator, amount):
        self.amount = _positive("Amount", amount, price_indicator)
        super().__init__(price_indicator, FixedOffset(self.amount))


class FixedAmountStopLossRule(_FixedAmountStopRule):
    TYPE_NAME = "FixedAmountStopLossRule"


class FixedAmountStopGainRule(_FixedAmountStopRule):
    TYPE_NAME = "FixedAmountStopGainRule"
    GAIN = True


class TrailingFixedAmountStopLossRule(_FixedAmountStopRule):
    TYPE_NAME = "TrailingFixedAmountStopLossRule"
    TRAILING = True


class TrailingFixedAmountStopGainRule(_FixedAmountStopRule):
    TYPE_NAME = "TrailingFixedAmountStopGainRule"
    GAIN = True
    TRAILING = True


# --- Average true range ---

class _AverageTrueRangeStopRule(StopRule):
    """Offset is coefficient * ATR(bar_count); price defaults to the close."""

    def __init__(
        self,
        series: BarSeries,
        bar_count: int = ATR_BAR_COUNT,
        coefficient=1,
        price_indicator: Optional[Indicator] = None,
    ):
        if bar_count < 1:
            raise ValueError(f"ATR bar count must be >= 1, got {bar_count}")
        if price_indicator is None:
            price_indicator = ClosePriceIndicator(series)
        self.series = series
        self.bar_count = bar_count
        self.coefficient = _positive("Coefficient", coefficient, price_indicator)
        self.atr = ATRIndicator(series, bar_count)
        super().__init__(price_indicator, IndicatorOffset(self.atr, self.coefficient))


class AverageTrueRangeStopLossRule(_AverageTrueRangeStopRule):
    TYPE_NAME = "AverageTrueRangeStopLossRule"


class AverageTrueRangeStopGainRule(_AverageTrueRangeStopRule):
    TYPE_NAME = "AverageTrueRangeStopGainRule"
    GAIN = True


class AverageTrueRangeTrailingStopLossRule(_AverageTrueRangeStopRule):
    TYPE_NAME = "AverageTrueRangeTrailingStopLossRule"
    TRAILING = True


class AverageTrueRangeTrailingStopGainRule(_AverageTrueRangeStopRule):
    TYPE_NAME = "AverageTrueRangeTrailingStopGainRule"
    GAIN = True
    TRAILING = True


# --- Volatility (standard deviation) ---

class _VolatilityStopRule(StopRule):
    """Offset is coefficient * standard deviation of the price over bar_count bars."""

    def __init__(self, price_indicator: Indicator, bar_count: int = VOLATILITY_BAR_COUNT, coefficient=1):
        if bar_count < 1:
            raise ValueError(f"Volatility bar count must be >= 1, got {bar_count}")
        self.bar_count = bar_count
        self.coefficient = _positive("Coefficient", coefficient, price_indicator)
        self.volatility = StandardDeviationIndicator(price_indicator, bar_count)
        super().__init__(price_indicator, IndicatorOffset(self.volatility, self.coefficient))


class VolatilityStopLossRule(_VolatilityStopRule):
    TYPE_NAME = "VolatilityStopLossRule"


class VolatilityStopGainRule(_VolatilityStopRule):
    TYPE_NAME = "VolatilityStopGainRule"
    GAIN = True


class VolatilityTrailingStopLossRule(_VolatilityStopRule):
    TYPE_NAME = "VolatilityTrailingStopLossRule"
    TRAILING = True


class VolatilityTrailingStopGainRule(_VolatilityStopRule):
    TYPE_NAME = "VolatilityTrailingStopGainRule"
    GAIN = True
    TRAILING = True
