"""
Rule algebra module.

Boolean, windowed, stateful, stop, calendar and indicator-comparison rules,
plus the entry/exit strategy that combines them.
"""
from .base import Rule, CompositeRule
from .boolean import BooleanRule, FixedRule, AndRule, OrRule, XorRule, NotRule
from .threshold import (
    AndWithThresholdRule,
    OrWithThresholdRule,
    VoteRule,
    ChainLink,
    ChainRule,
)
from .stateful import JustOnceRule, WaitForRule
from .stops import (
    StopRule,
    StopLossRule,
    StopGainRule,
    TrailingStopLossRule,
    TrailingStopGainRule,
    FixedAmountStopLossRule,
    FixedAmountStopGainRule,
    TrailingFixedAmountStopLossRule,
    TrailingFixedAmountStopGainRule,
    AverageTrueRangeStopLossRule,
    AverageTrueRangeStopGainRule,
    AverageTrueRangeTrailingStopLossRule,
    AverageTrueRangeTrailingStopGainRule,
    VolatilityStopLossRule,
    VolatilityStopGainRule,
    VolatilityTrailingStopLossRule,
    VolatilityTrailingStopGainRule,
)
from .calendar import (
    DayOfWeek,
    DayOfWeekRule,
    HourOfDayRule,
    MinuteOfHourRule,
    TimeRange,
    TimeRangeRule,
)
from .indicator_rules import (
    OverIndicatorRule,
    UnderIndicatorRule,
    CrossedUpIndicatorRule,
    CrossedDownIndicatorRule,
)
from .strategy import BaseStrategy

__all__ = [
    'Rule',
    'CompositeRule',
    'BooleanRule',
    'FixedRule',
    'AndRule',
    'OrRule',
    'XorRule',
    'NotRule',
    'AndWithThresholdRule',
    'OrWithThresholdRule',
    'VoteRule',
    'ChainLink',
    'ChainRule',
    'JustOnceRule',
    'WaitForRule',
    'StopRule',
    'StopLossRule',
    'StopGainRule',
    'TrailingStopLossRule',
    'TrailingStopGainRule',
    'FixedAmountStopLossRule',
    'FixedAmountStopGainRule',
    'TrailingFixedAmountStopLossRule',
    'TrailingFixedAmountStopGainRule',
    'AverageTrueRangeStopLossRule',
    'AverageTrueRangeStopGainRule',
    'AverageTrueRangeTrailingStopLossRule',
    'AverageTrueRangeTrailingStopGainRule',
    'VolatilityStopLossRule',
    'VolatilityStopGainRule',
    'VolatilityTrailingStopLossRule',
    'VolatilityTrailingStopGainRule',
    'DayOfWeek',
    'DayOfWeekRule',
    'HourOfDayRule',
    'MinuteOfHourRule',
    'TimeRange',
    'TimeRangeRule',
    'OverIndicatorRule',
    'UnderIndicatorRule',
    'CrossedUpIndicatorRule',
    'CrossedDownIndicatorRule',
    'BaseStrategy',
]
