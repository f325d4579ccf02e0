"""
Shared defaults for the rule core.

This module provides centralized default values for indicator,
rule and numeric parameters.
"""
from .defaults import (
    DEFAULT_NUM_FACTORY, DECIMAL_PRECISION,
    ATR_BAR_COUNT, VOLATILITY_BAR_COUNT,
    DEFAULT_TRADE_AMOUNT,
    DEFAULT_BAR_PERIOD, DEFAULT_START_DATE,
    UNSTABLE_BARS,
)

__all__ = [
    'DEFAULT_NUM_FACTORY', 'DECIMAL_PRECISION',
    'ATR_BAR_COUNT', 'VOLATILITY_BAR_COUNT',
    'DEFAULT_TRADE_AMOUNT',
    'DEFAULT_BAR_PERIOD', 'DEFAULT_START_DATE',
    'UNSTABLE_BARS',
]
