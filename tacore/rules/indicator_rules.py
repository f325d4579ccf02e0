"""
Rules comparing two indicators (or an indicator and a constant).
"""
from abc import abstractmethod
from typing import Union

from .base import Rule
from ..indicators import ConstantIndicator, Indicator


class _IndicatorComparisonRule(Rule):
    """Holds first and second operands; a plain number becomes a ConstantIndicator."""

    def __init__(self, first: Indicator, second: Union[Indicator, int, float, str]):
        if first is None or second is None:
            raise ValueError(f"{self.TYPE_NAME} requires two operands")
        super().__init__()
        if not isinstance(second, Indicator):
            second = ConstantIndicator(first.series, second)
        self.first = first
        self.second = second

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        if self.first.series.is_empty():
            return self.trace(index, False)
        return self.trace(index, self._compare(index))

    @abstractmethod
    def _compare(self, index: int) -> bool:
        pass


class OverIndicatorRule(_IndicatorComparisonRule):
    """first > second."""

    TYPE_NAME = "OverIndicatorRule"

    def _compare(self, index: int) -> bool:
        return self.first.get_value(index) > self.second.get_value(index)


class UnderIndicatorRule(_IndicatorComparisonRule):
    """first < second."""

    TYPE_NAME = "UnderIndicatorRule"

    def _compare(self, index: int) -> bool:
        return self.first.get_value(index) < self.second.get_value(index)


class CrossedUpIndicatorRule(_IndicatorComparisonRule):
    """
    first crossed above second at index.

    first > second now, and before that (skipping bars where the two were
    equal) first was below second.
    """

    TYPE_NAME = "CrossedUpIndicatorRule"

    def _compare(self, index: int) -> bool:
        if index == 0 or not self.first.get_value(index) > self.second.get_value(index):
            return False
        i = index - 1
        while i > 0 and self.first.get_value(i) == self.second.get_value(i):
            i -= 1
        return self.first.get_value(i) < self.second.get_value(i)


class CrossedDownIndicatorRule(_IndicatorComparisonRule):
    """first crossed below second at index (mirror of CrossedUpIndicatorRule)."""

    TYPE_NAME = "CrossedDownIndicatorRule"

    def _compare(self, index: int) -> bool:
        if index == 0 or not self.first.get_value(index) < self.second.get_value(index):
            return False
        i = index - 1
        while i > 0 and self.first.get_value(i) == self.second.get_value(i):
            i -= 1
        return self.first.get_value(i) > self.second.get_value(i)
