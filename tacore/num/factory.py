"""
Num factories: bind a numeric representation to a whole series.

A NumFactory converts plain Python values (int, float, str, Decimal, numpy
scalars) into Num values of one representation and exposes the common
constants. Factories are looked up by name so configuration files can pick
one ("double" or "decimal").
"""
from __future__ import annotations

import math
import numbers
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Dict

from .num import Num, DoubleNum, DecimalNum, NaN
from ..shared.defaults import DECIMAL_PRECISION, DEFAULT_NUM_FACTORY


class NumFactory(ABC):
    """Constructs Num values bound to one representation."""

    name: str = ""

    def __init__(self):
        self.minus_one = self.num_of(-1)
        self.zero = self.num_of(0)
        self.one = self.num_of(1)
        self.two = self.num_of(2)
        self.three = self.num_of(3)
        self.hundred = self.num_of(100)
        self.thousand = self.num_of(1000)

    @abstractmethod
    def num_of(self, value) -> Num:
        """
        Convert value to a Num of this factory's representation.

        Args:
            value: int, float, str, Decimal, numpy scalar or Num

        Returns:
            Num value (NaN for float/str NaN input)

        Raises:
            TypeError: If value cannot be interpreted as a number
            ValueError: If a string does not parse as a number
        """

    @abstractmethod
    def produces(self, num: Num) -> bool:
        """True if num has this factory's representation (NaN belongs to every factory)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DoubleNumFactory(NumFactory):
    """Factory for float-backed values."""

    name = "double"

    def num_of(self, value) -> Num:
        if isinstance(value, Num):
            if value.is_nan():
                return NaN
            if isinstance(value, DoubleNum):
                return value
            return DoubleNum(float(value.delegate), self)
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                raise ValueError(f"Cannot convert '{value}' to a number")
        if isinstance(value, (numbers.Real, Decimal)):
            converted = float(value)
            if math.isnan(converted):
                return NaN
            return DoubleNum(converted, self)
        raise TypeError(f"Cannot convert {type(value).__name__} to DoubleNum")

    def produces(self, num: Num) -> bool:
        return num.is_nan() or isinstance(num, DoubleNum)


class DecimalNumFactory(NumFactory):
    """Factory for arbitrary-precision decimal values."""

    name = "decimal"

    def __init__(self, precision: int = DECIMAL_PRECISION):
        if precision < 1:
            raise ValueError(f"precision must be >= 1, got {precision}")
        self.precision = precision
        super().__init__()

    def num_of(self, value) -> Num:
        if isinstance(value, Num):
            if value.is_nan():
                return NaN
            if isinstance(value, DecimalNum) and value.factory is self:
                return value
            value = value.delegate
        if isinstance(value, float):
            if math.isnan(value):
                return NaN
            return DecimalNum(Decimal(repr(float(value))), self)
        if isinstance(value, str):
            try:
                parsed = Decimal(value.strip())
            except InvalidOperation:
                raise ValueError(f"Cannot convert '{value}' to a number")
            return NaN if parsed.is_nan() else DecimalNum(parsed, self)
        if isinstance(value, Decimal):
            return NaN if value.is_nan() else DecimalNum(value, self)
        if isinstance(value, numbers.Integral):
            return DecimalNum(Decimal(int(value)), self)
        if isinstance(value, numbers.Real):
            return self.num_of(float(value))
        raise TypeError(f"Cannot convert {type(value).__name__} to DecimalNum")

    def produces(self, num: Num) -> bool:
        return num.is_nan() or isinstance(num, DecimalNum)

    def __repr__(self) -> str:
        return f"DecimalNumFactory(precision={self.precision})"


_FACTORIES: Dict[str, type] = {
    DoubleNumFactory.name: DoubleNumFactory,
    DecimalNumFactory.name: DecimalNumFactory,
}


def get_num_factory(name: str = DEFAULT_NUM_FACTORY) -> NumFactory:
    """
    Create a factory by name.

    Raises:
        ValueError: If name is not "double" or "decimal"
    """
    try:
        return _FACTORIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown num factory '{name}', expected one of {sorted(_FACTORIES)}"
        )
