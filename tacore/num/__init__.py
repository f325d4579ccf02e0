"""
Numeric representation module.

Provides the Num value type (DoubleNum, DecimalNum, NaN) and the factories
that bind one representation to a series.
"""
from .num import Num, DoubleNum, DecimalNum, NaN
from .factory import NumFactory, DoubleNumFactory, DecimalNumFactory, get_num_factory

__all__ = [
    'Num',
    'DoubleNum',
    'DecimalNum',
    'NaN',
    'NumFactory',
    'DoubleNumFactory',
    'DecimalNumFactory',
    'get_num_factory',
]
