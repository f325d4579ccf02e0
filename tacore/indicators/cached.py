"""
Memoizing indicator base.

CachedIndicator keeps one slot per bar index. A slot is either uncomputed
(the module-level _UNCOMPUTED sentinel) or holds the computed value, which
may itself be NaN when the value is legitimately missing at that index.

get_value(index):
1. Bounds-check index against the series
2. Grow the store to index + 1 slots, new slots uncomputed
3. Return the slot if already computed
4. Otherwise scan backward to the nearest computed slot (or index 0)
5. Forward-fill from there through index, calling calculate(j) only for
   uncomputed j, in ascending order

calculate(j) therefore runs at most once per index, and recursive formulas
that read get_value(j - 1) never recurse deeper than one level.

Not thread-safe: one instance must not be evaluated from several threads
concurrently.
"""
from abc import abstractmethod
import logging
from typing import Any, List

from .base import Indicator
from ..series import BarSeries

logger = logging.getLogger(__name__)


class _Uncomputed:
    """Marker type for slots that have not been calculated yet."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<uncomputed>"


_UNCOMPUTED = _Uncomputed()


class CachedIndicator(Indicator):
    """Indicator whose values are calculated once per index and then reused."""

    def __init__(self, series: BarSeries):
        super().__init__(series)
        self._values: List[Any] = []

    @abstractmethod
    def calculate(self, index: int) -> Any:
        """
        Compute the value at index.

        May read get_value(j) for j < index on this or other indicators.
        """
        pass

    def get_value(self, index: int) -> Any:
        self.series.check_index(index)
        values = self._values
        if len(values) <= index:
            values.extend([_UNCOMPUTED] * (index + 1 - len(values)))

        value = values[index]
        if value is not _UNCOMPUTED:
            return value

        start = index
        while start > 0 and values[start - 1] is _UNCOMPUTED:
            start -= 1

        logger.debug(f"{self!r}: filling indices {start}..{index}")
        for j in range(start, index + 1):
            if values[j] is _UNCOMPUTED:
                values[j] = self.calculate(j)
        return values[index]

    @property
    def computed_count(self) -> int:
        """Number of slots holding a computed value."""
        return sum(1 for v in self._values if v is not _UNCOMPUTED)

    def is_computed(self, index: int) -> bool:
        return index < len(self._values) and self._values[index] is not _UNCOMPUTED


class RecursiveCachedIndicator(CachedIndicator):
    """
    Cached indicator whose value at index depends on the value at index - 1.

    The forward fill in CachedIndicator already keeps recursion shallow; this
    subclass exists to name the dependency for moving-average style formulas.
    """
    pass
