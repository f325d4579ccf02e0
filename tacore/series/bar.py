"""
Bar: one OHLCV observation closing at end_time.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..num import Num


@dataclass(frozen=True)
class Bar:
    """Immutable OHLCV bar. Prices and volume are Num values of the series' factory."""
    end_time: datetime
    open_price: Num
    high_price: Num
    low_price: Num
    close_price: Num
    volume: Num
    time_period: Optional[timedelta] = None

    @property
    def begin_time(self) -> Optional[datetime]:
        """Start of the bar period, or None if the period is unknown."""
        if self.time_period is None:
            return None
        return self.end_time - self.time_period

    def is_bullish(self) -> bool:
        return self.close_price > self.open_price

    def is_bearish(self) -> bool:
        return self.close_price < self.open_price
