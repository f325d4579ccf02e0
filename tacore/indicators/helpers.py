"""
Primitive indicators that read bar data, plus constant and lagged values.
"""
from datetime import datetime

from .base import Indicator
from .cached import CachedIndicator
from ..num import Num, NaN
from ..series import BarSeries


class _BarFieldIndicator(Indicator):
    """Reads one attribute of each bar."""

    field = ""

    def get_value(self, index: int):
        return getattr(self.series.get_bar(index), self.field)


class ClosePriceIndicator(_BarFieldIndicator):
    field = "close_price"


class OpenPriceIndicator(_BarFieldIndicator):
    field = "open_price"


class HighPriceIndicator(_BarFieldIndicator):
    field = "high_price"


class LowPriceIndicator(_BarFieldIndicator):
    field = "low_price"


class VolumeIndicator(_BarFieldIndicator):
    field = "volume"


class DateTimeIndicator(_BarFieldIndicator):
    """Bar end time as a datetime; feeds the calendar rules."""

    field = "end_time"

    def get_value(self, index: int) -> datetime:
        return super().get_value(index)


class ConstantIndicator(Indicator):
    """Same value at every index."""

    def __init__(self, series: BarSeries, value):
        super().__init__(series)
        self.value: Num = value if isinstance(value, Num) else series.num_factory.num_of(value)

    def get_value(self, index: int) -> Num:
        self.series.check_index(index)
        return self.value

    def __repr__(self) -> str:
        return f"ConstantIndicator({self.value})"


class PreviousValueIndicator(CachedIndicator):
    """Value of another indicator n bars earlier (NaN for the first n bars)."""

    def __init__(self, indicator: Indicator, n: int = 1):
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        super().__init__(indicator.series)
        self.indicator = indicator
        self.n = n

    def calculate(self, index: int):
        if index < self.n:
            return NaN
        return self.indicator.get_value(index - self.n)

    @property
    def count_of_unstable_bars(self) -> int:
        return self.n + self.indicator.count_of_unstable_bars

    def __repr__(self) -> str:
        return f"PreviousValueIndicator({self.indicator!r}, n={self.n})"
