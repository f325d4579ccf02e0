"""
Indicators module.

Provides the memoizing indicator base and the primitive and volatility
indicators consumed by rules.
"""
from .base import Indicator
from .cached import CachedIndicator, RecursiveCachedIndicator
from .helpers import (
    ClosePriceIndicator,
    OpenPriceIndicator,
    HighPriceIndicator,
    LowPriceIndicator,
    VolumeIndicator,
    DateTimeIndicator,
    ConstantIndicator,
    PreviousValueIndicator,
)
from .volatility import TrueRangeIndicator, ATRIndicator, StandardDeviationIndicator

__all__ = [
    'Indicator',
    'CachedIndicator',
    'RecursiveCachedIndicator',
    'ClosePriceIndicator',
    'OpenPriceIndicator',
    'HighPriceIndicator',
    'LowPriceIndicator',
    'VolumeIndicator',
    'DateTimeIndicator',
    'ConstantIndicator',
    'PreviousValueIndicator',
    'TrueRangeIndicator',
    'ATRIndicator',
    'StandardDeviationIndicator',
]
