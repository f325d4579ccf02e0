"""
Numeric value abstraction.

All indicator and rule arithmetic goes through Num so the same code runs on
binary floats (DoubleNum) or arbitrary-precision decimals (DecimalNum).
A series binds one representation through its NumFactory; values of
different representations are never mixed in one operation.
"""
from __future__ import annotations

import math
import operator
from abc import ABC, abstractmethod
from decimal import Decimal, localcontext
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from .factory import NumFactory


class Num(ABC):
    """
    Immutable numeric value.

    Supports +, -, *, /, unary minus, abs() and rich comparisons. Plain
    Python numbers on either side are converted with the value's own factory.
    NaN absorbs every arithmetic operation and makes every ordering
    comparison False.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def delegate(self) -> Any:
        """Underlying representation (float or Decimal)."""

    @property
    @abstractmethod
    def factory(self) -> Optional["NumFactory"]:
        """Factory that produced this value (None for NaN)."""

    @abstractmethod
    def is_nan(self) -> bool:
        pass

    @abstractmethod
    def sqrt(self) -> "Num":
        pass

    @abstractmethod
    def pow(self, exponent) -> "Num":
        pass

    @abstractmethod
    def log(self) -> "Num":
        pass

    def is_zero(self) -> bool:
        return not self.is_nan() and self == 0

    def is_positive(self) -> bool:
        return self > 0

    def is_negative(self) -> bool:
        return self < 0

    def is_positive_or_zero(self) -> bool:
        return self >= 0

    def min(self, other) -> "Num":
        if self.is_nan() or _is_nan_like(other):
            return NaN
        return self if self <= other else self.factory.num_of(other)

    def max(self, other) -> "Num":
        if self.is_nan() or _is_nan_like(other):
            return NaN
        return self if self >= other else self.factory.num_of(other)


def _is_nan_like(value) -> bool:
    if isinstance(value, Num):
        return value.is_nan()
    if isinstance(value, float):
        return math.isnan(value)
    return False


class _RealNum(Num):
    """Arithmetic shared by the concrete (non-NaN) representations."""

    __slots__ = ("_value", "_factory")

    def __init__(self, value, factory: "NumFactory"):
        self._value = value
        self._factory = factory

    @property
    def delegate(self):
        return self._value

    @property
    def factory(self) -> "NumFactory":
        return self._factory

    def is_nan(self) -> bool:
        return False

    def _wrap(self, raw) -> Num:
        return type(self)(raw, self._factory)

    def _apply(self, op: Callable, left, right):
        return op(left, right)

    def _coerce(self, other):
        """Return the raw delegate of other, None for NaN, NotImplemented for foreign types."""
        if isinstance(other, Num):
            if other.is_nan():
                return None
            if type(other) is not type(self):
                raise TypeError(
                    f"Cannot mix {type(self).__name__} and {type(other).__name__} in one operation"
                )
            return other.delegate
        if isinstance(other, (int, float, Decimal)):
            converted = self._factory.num_of(other)
            return None if converted.is_nan() else converted.delegate
        return NotImplemented

    def _binary(self, other, op: Callable, reverse: bool = False):
        raw = self._coerce(other)
        if raw is NotImplemented:
            return NotImplemented
        if raw is None:
            return NaN
        left, right = (raw, self._value) if reverse else (self._value, raw)
        if op is operator.truediv and right == 0:
            return NaN
        return self._wrap(self._apply(op, left, right))

    def __add__(self, other):
        return self._binary(other, operator.add)

    def __radd__(self, other):
        return self._binary(other, operator.add, reverse=True)

    def __sub__(self, other):
        return self._binary(other, operator.sub)

    def __rsub__(self, other):
        return self._binary(other, operator.sub, reverse=True)

    def __mul__(self, other):
        return self._binary(other, operator.mul)

    def __rmul__(self, other):
        return self._binary(other, operator.mul, reverse=True)

    def __truediv__(self, other):
        return self._binary(other, operator.truediv)

    def __rtruediv__(self, other):
        return self._binary(other, operator.truediv, reverse=True)

    def __neg__(self):
        return self._wrap(-self._value)

    def __abs__(self):
        return self._wrap(abs(self._value))

    def _compare(self, other, op: Callable):
        raw = self._coerce(other)
        if raw is NotImplemented:
            return NotImplemented
        if raw is None:
            return False
        return op(self._value, raw)

    def __lt__(self, other):
        return self._compare(other, operator.lt)

    def __le__(self, other):
        return self._compare(other, operator.le)

    def __gt__(self, other):
        return self._compare(other, operator.gt)

    def __ge__(self, other):
        return self._compare(other, operator.ge)

    def __eq__(self, other):
        if isinstance(other, Num):
            return type(other) is type(self) and self._value == other.delegate
        if isinstance(other, (int, float, Decimal)):
            converted = self._factory.num_of(other)
            return not converted.is_nan() and self._value == converted.delegate
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __float__(self):
        return float(self._value)

    def __int__(self):
        return int(self._value)

    def __repr__(self):
        return f"{type(self).__name__}({self})"


class DoubleNum(_RealNum):
    """Num backed by a binary float."""

    __slots__ = ()

    def sqrt(self) -> Num:
        if self._value < 0:
            return NaN
        return self._wrap(math.sqrt(self._value))

    def pow(self, exponent) -> Num:
        return self._wrap(self._value ** float(exponent))

    def log(self) -> Num:
        if self._value <= 0:
            return NaN
        return self._wrap(math.log(self._value))

    def __str__(self):
        return repr(self._value)


class DecimalNum(_RealNum):
    """Num backed by decimal.Decimal with the factory's precision."""

    __slots__ = ()

    def _apply(self, op: Callable, left, right):
        with localcontext() as ctx:
            ctx.prec = self._factory.precision
            return op(left, right)

    def __neg__(self):
        return self._wrap(self._apply(operator.sub, Decimal(0), self._value))

    def sqrt(self) -> Num:
        if self._value < 0:
            return NaN
        with localcontext() as ctx:
            ctx.prec = self._factory.precision
            return self._wrap(self._value.sqrt())

    def pow(self, exponent) -> Num:
        exponent = exponent.delegate if isinstance(exponent, Num) else Decimal(str(exponent))
        return self._wrap(self._apply(operator.pow, self._value, exponent))

    def log(self) -> Num:
        if self._value <= 0:
            return NaN
        with localcontext() as ctx:
            ctx.prec = self._factory.precision
            return self._wrap(self._value.ln())

    def __str__(self):
        normalized = self._value.normalize()
        if normalized == 0:
            return "0"
        return format(normalized, "f")


class _NaNNum(Num):
    """The single not-a-number value; shared by every representation."""

    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def delegate(self):
        return float("nan")

    @property
    def factory(self):
        return None

    def is_nan(self) -> bool:
        return True

    def sqrt(self) -> Num:
        return self

    def pow(self, exponent) -> Num:
        return self

    def log(self) -> Num:
        return self

    def min(self, other) -> Num:
        return self

    def max(self, other) -> Num:
        return self

    def _absorb(self, other):
        return self

    __add__ = __radd__ = __sub__ = __rsub__ = _absorb
    __mul__ = __rmul__ = __truediv__ = __rtruediv__ = _absorb

    def __neg__(self):
        return self

    def __abs__(self):
        return self

    def _never(self, other):
        return False

    __lt__ = __le__ = __gt__ = __ge__ = _never

    def __eq__(self, other):
        return other is self

    def __hash__(self):
        return hash("NaN")

    def __float__(self):
        return float("nan")

    def __str__(self):
        return "NaN"

    def __repr__(self):
        return "NaN"

    def __reduce__(self):
        return (_NaNNum, ())


NaN = _NaNNum()
