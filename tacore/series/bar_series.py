"""
Read-only bar series.

A BarSeries is an ordered, immutable sequence of bars sharing one NumFactory.
Indicators and rules address bars by index in [0, bar_count); any other
index raises IndexError immediately.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Iterable, Iterator, List, Optional, Sequence

import numpy as np
import pandas as pd

from .bar import Bar
from ..num import NumFactory, get_num_factory
from ..shared.defaults import DEFAULT_BAR_PERIOD, DEFAULT_START_DATE


OHLCV_COLUMNS = ("Open", "High", "Low", "Close", "Volume")


class BarSeries:
    """Ordered bars with a shared numeric representation."""

    def __init__(
        self,
        bars: Iterable[Bar] = (),
        name: str = "",
        num_factory: Optional[NumFactory] = None,
    ):
        """
        Initialize series.

        Args:
            bars: Bars in ascending end_time order
            name: Series name (e.g. instrument ticker)
            num_factory: Factory all bar values were built with (default: double)

        Raises:
            ValueError: If bars are not strictly ordered by end_time or a bar
                value was built with a different factory
        """
        self.name = name
        self.num_factory = num_factory if num_factory is not None else get_num_factory()
        self._bars: List[Bar] = list(bars)
        for prev, bar in zip(self._bars, self._bars[1:]):
            if bar.end_time <= prev.end_time:
                raise ValueError(
                    f"Bars must be in ascending end_time order: {bar.end_time} follows {prev.end_time}"
                )
        for bar in self._bars:
            if not self.num_factory.produces(bar.close_price):
                raise ValueError(
                    f"Bar at {bar.end_time} was not built with {self.num_factory!r}"
                )

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        name: str = "",
        num_factory: Optional[NumFactory] = None,
        time_period: Optional[timedelta] = None,
    ) -> "BarSeries":
        """
        Build a series from an OHLCV DataFrame with a datetime index.

        Column names follow the Open/High/Low/Close/Volume convention. Only
        Close is required: missing price columns fall back to Close and a
        missing Volume column to zero.

        Args:
            df: Price frame indexed by bar end time
            name: Series name
            num_factory: Factory used for every bar value (default: double)
            time_period: Duration of each bar (optional)

        Returns:
            BarSeries with one bar per row

        Raises:
            ValueError: If the Close column is missing or the index is not a
                strictly increasing datetime index
        """
        if "Close" not in df.columns:
            raise ValueError(f"DataFrame must contain a 'Close' column, got {list(df.columns)}")
        if not isinstance(df.index, pd.DatetimeIndex):
            raise ValueError("DataFrame index must be a DatetimeIndex")
        if not df.index.is_monotonic_increasing or df.index.has_duplicates:
            raise ValueError("DataFrame index must be strictly increasing")

        factory = num_factory if num_factory is not None else get_num_factory()
        close = df["Close"].to_numpy(dtype=float)
        columns = {
            col: df[col].to_numpy(dtype=float) if col in df.columns else close
            for col in ("Open", "High", "Low")
        }
        volume = (
            df["Volume"].to_numpy(dtype=float)
            if "Volume" in df.columns
            else np.zeros(len(df), dtype=float)
        )

        bars = [
            Bar(
                end_time=timestamp.to_pydatetime(),
                open_price=factory.num_of(columns["Open"][i]),
                high_price=factory.num_of(columns["High"][i]),
                low_price=factory.num_of(columns["Low"][i]),
                close_price=factory.num_of(close[i]),
                volume=factory.num_of(volume[i]),
                time_period=time_period,
            )
            for i, timestamp in enumerate(df.index)
        ]
        return cls(bars, name=name, num_factory=factory)

    @classmethod
    def from_close_prices(
        cls,
        close_prices: Sequence[float],
        name: str = "",
        num_factory: Optional[NumFactory] = None,
        start: str = DEFAULT_START_DATE,
        freq: str = DEFAULT_BAR_PERIOD,
    ) -> "BarSeries":
        """Build a series of flat bars (open = high = low = close) at a regular frequency."""
        dates = pd.date_range(start, periods=len(close_prices), freq=freq)
        df = pd.DataFrame({"Close": list(close_prices)}, index=dates)
        return cls.from_dataframe(df, name=name, num_factory=num_factory)

    def to_dataframe(self) -> pd.DataFrame:
        """Render bars as an OHLCV DataFrame indexed by end time."""
        index = pd.DatetimeIndex([bar.end_time for bar in self._bars])
        data = {
            "Open": [float(bar.open_price) for bar in self._bars],
            "High": [float(bar.high_price) for bar in self._bars],
            "Low": [float(bar.low_price) for bar in self._bars],
            "Close": [float(bar.close_price) for bar in self._bars],
            "Volume": [float(bar.volume) for bar in self._bars],
        }
        return pd.DataFrame(data, index=index, columns=list(OHLCV_COLUMNS))

    @property
    def bar_count(self) -> int:
        return len(self._bars)

    @property
    def begin_index(self) -> int:
        return 0 if self._bars else -1

    @property
    def end_index(self) -> int:
        return len(self._bars) - 1

    def is_empty(self) -> bool:
        return not self._bars

    def check_index(self, index: int) -> None:
        """Raise IndexError unless 0 <= index < bar_count."""
        if not 0 <= index < len(self._bars):
            raise IndexError(
                f"Index {index} out of range for series '{self.name}' with {len(self._bars)} bars"
            )

    def get_bar(self, index: int) -> Bar:
        self.check_index(index)
        return self._bars[index]

    def __len__(self) -> int:
        return len(self._bars)

    def __iter__(self) -> Iterator[Bar]:
        return iter(self._bars)

    def __repr__(self) -> str:
        return f"BarSeries(name={self.name!r}, bars={len(self._bars)}, num_factory={self.num_factory!r})"
