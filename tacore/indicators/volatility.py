"""
Volatility indicators used by the ATR and volatility stop rules.

- TrueRangeIndicator: max(high - low, |high - prev close|, |low - prev close|)
- ATRIndicator: Wilder moving average of the true range
- StandardDeviationIndicator: population standard deviation over a window
"""
from .base import Indicator
from .cached import CachedIndicator, RecursiveCachedIndicator
from ..num import Num
from ..series import BarSeries
from ..shared.defaults import ATR_BAR_COUNT, VOLATILITY_BAR_COUNT


class TrueRangeIndicator(CachedIndicator):
    """True range; at index 0 there is no previous close, so it is high - low."""

    def calculate(self, index: int) -> Num:
        bar = self.series.get_bar(index)
        high_low = bar.high_price - bar.low_price
        if index == 0:
            return abs(high_low)
        prev_close = self.series.get_bar(index - 1).close_price
        high_close = abs(bar.high_price - prev_close)
        low_close = abs(bar.low_price - prev_close)
        return abs(high_low).max(high_close).max(low_close)


class ATRIndicator(RecursiveCachedIndicator):
    """
    Average true range (Wilder smoothing).

    ATR(0) = TR(0)
    ATR(i) = ATR(i-1) + (TR(i) - ATR(i-1)) / bar_count
    """

    def __init__(self, series: BarSeries, bar_count: int = ATR_BAR_COUNT):
        if bar_count < 1:
            raise ValueError(f"bar_count must be >= 1, got {bar_count}")
        super().__init__(series)
        self.bar_count = bar_count
        self.true_range = TrueRangeIndicator(series)

    def calculate(self, index: int) -> Num:
        tr = self.true_range.get_value(index)
        if index == 0:
            return tr
        prev = self.get_value(index - 1)
        return prev + (tr - prev) / self.bar_count

    @property
    def count_of_unstable_bars(self) -> int:
        return self.bar_count

    def __repr__(self) -> str:
        return f"ATRIndicator(bar_count={self.bar_count})"


class StandardDeviationIndicator(CachedIndicator):
    """Population standard deviation of an indicator over the last bar_count values."""

    def __init__(self, indicator: Indicator, bar_count: int = VOLATILITY_BAR_COUNT):
        if bar_count < 1:
            raise ValueError(f"bar_count must be >= 1, got {bar_count}")
        super().__init__(indicator.series)
        self.indicator = indicator
        self.bar_count = bar_count

    def calculate(self, index: int) -> Num:
        start = max(0, index - self.bar_count + 1)
        window = [self.indicator.get_value(i) for i in range(start, index + 1)]
        total = self.num_factory.zero
        for value in window:
            total = total + value
        mean = total / len(window)
        squares = self.num_factory.zero
        for value in window:
            squares = squares + (value - mean) * (value - mean)
        return (squares / len(window)).sqrt()

    @property
    def count_of_unstable_bars(self) -> int:
        return self.bar_count

    def __repr__(self) -> str:
        return f"StandardDeviationIndicator({self.indicator!r}, bar_count={self.bar_count})"
