"""
Tests for indicator comparison rules and BaseStrategy.
"""
import pytest
from tacore.indicators import ClosePriceIndicator, ConstantIndicator
from tacore.rules import (
    BaseStrategy,
    BooleanRule,
    CrossedDownIndicatorRule,
    CrossedUpIndicatorRule,
    FixedRule,
    OverIndicatorRule,
    UnderIndicatorRule,
)
from tacore.rules.indicator_rules import _IndicatorComparisonRule
from tacore.series import BarSeries
from tacore.trading import TradingRecord


@pytest.fixture
def close():
    return ClosePriceIndicator(BarSeries.from_close_prices([8, 9, 10, 10, 11, 12, 10, 9]))


def _fired(rule, count=8):
    return [i for i in range(count) if rule.is_satisfied(i)]


class TestComparisonRules:
    """Over/under against an indicator or a constant."""

    def test_over_constant(self, close):
        assert _fired(OverIndicatorRule(close, 10)) == [4, 5]

    def test_under_constant(self, close):
        assert _fired(UnderIndicatorRule(close, 10)) == [0, 1, 7]

    def test_constant_is_wrapped(self, close):
        rule = OverIndicatorRule(close, 10)

        assert isinstance(rule.second, ConstantIndicator)
        assert rule.second.value == 10

    def test_two_indicators(self, close):
        series = close.series
        rule = OverIndicatorRule(close, ConstantIndicator(series, 11))
        assert _fired(rule) == [5]

    def test_requires_operands(self, close):
        with pytest.raises(ValueError, match="requires two operands"):
            OverIndicatorRule(close, None)


class TestCrossingRules:
    """Crossings skip bars where both operands were equal."""

    def test_crossed_up_through_equal_bars(self, close):
        # 9 < 10, then 10 == 10 twice, then 11 > 10
        assert _fired(CrossedUpIndicatorRule(close, 10)) == [4]

    def test_crossed_down(self, close):
        assert _fired(CrossedDownIndicatorRule(close, 11)) == [6]

    def test_never_at_first_bar(self):
        close = ClosePriceIndicator(BarSeries.from_close_prices([20, 5]))

        assert not CrossedUpIndicatorRule(close, 10).is_satisfied(0)
        assert CrossedDownIndicatorRule(close, 10).is_satisfied(1)

    def test_empty_series(self):
        close = ClosePriceIndicator(BarSeries())
        assert not OverIndicatorRule(close, 1).is_satisfied(0)


class TestBaseStrategy:
    """Entry/exit pairing with unstable bars."""

    def test_unstable_bars_block_signals(self):
        strategy = BaseStrategy(BooleanRule.TRUE, BooleanRule.TRUE, unstable_bars=3)

        assert strategy.is_unstable_at(2)
        assert not strategy.should_enter(2)
        assert strategy.should_enter(3)

    def test_should_operate(self):
        strategy = BaseStrategy(FixedRule(1), FixedRule(4))
        record = TradingRecord()

        assert not strategy.should_operate(0, record)
        assert strategy.should_operate(1, record)
        record.enter(1, 10)
        assert not strategy.should_operate(2, record)
        assert strategy.should_operate(4, record)

    def test_validation(self):
        with pytest.raises(ValueError, match="both an entry rule and an exit rule"):
            BaseStrategy(BooleanRule.TRUE, None)
        with pytest.raises(ValueError, match="unstable_bars must be >= 0"):
            BaseStrategy(BooleanRule.TRUE, BooleanRule.FALSE, unstable_bars=-1)


class TestComparisonHook:
    """A comparison rule without _compare cannot be built."""

    def test_missing_compare(self, close):
        class EqualIndicatorRule(_IndicatorComparisonRule):
            TYPE_NAME = "EqualIndicatorRule"

        with pytest.raises(TypeError, match="abstract"):
            EqualIndicatorRule(close, 10)
