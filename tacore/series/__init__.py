"""
Bar series module.

Read-only OHLCV bars and the series that indicators are evaluated on.
"""
from .bar import Bar
from .bar_series import BarSeries, OHLCV_COLUMNS

__all__ = [
    'Bar',
    'BarSeries',
    'OHLCV_COLUMNS',
]
