"""
Base indicator interface.

An indicator is a function from series index to value:
1. Primitive indicators read bar data directly
2. Derived indicators compose other indicators
Rules consume indicators through get_value only.
"""
from abc import ABC, abstractmethod
from typing import Any

import pandas as pd

from ..num import Num
from ..series import BarSeries


class Indicator(ABC):
    """
    Base class for all indicators.

    Indicators are bound to one BarSeries and address values by bar index.
    They do not generate signals directly; rules do.
    """

    def __init__(self, series: BarSeries):
        self.series = series

    @abstractmethod
    def get_value(self, index: int) -> Any:
        """
        Get indicator value at a bar index.

        Args:
            index: Bar index in [0, bar_count)

        Returns:
            Indicator value at index (NaN if undefined there)

        Raises:
            IndexError: If index is outside the series
        """
        pass

    @property
    def count_of_unstable_bars(self) -> int:
        """Number of leading bars whose values are not yet reliable."""
        return 0

    @property
    def num_factory(self):
        return self.series.num_factory

    def num_of(self, value) -> Num:
        return self.series.num_factory.num_of(value)

    def to_series(self) -> pd.Series:
        """
        Evaluate every index and return the values as a pandas Series.

        Num values are converted to float (NaN stays NaN); the index is the
        bar end time.
        """
        index = pd.DatetimeIndex([bar.end_time for bar in self.series])
        values = [self.get_value(i) for i in range(self.series.bar_count)]
        if all(isinstance(v, Num) for v in values):
            values = [float(v) for v in values]
        return pd.Series(values, index=index, name=repr(self))

    def __repr__(self) -> str:
        return type(self).__name__
