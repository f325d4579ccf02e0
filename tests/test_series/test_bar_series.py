"""
Tests for Bar and BarSeries construction.
"""
from datetime import datetime

import numpy as np
import pandas as pd
import pytest
from tacore.num import DecimalNum, DecimalNumFactory, DoubleNumFactory
from tacore.series import Bar, BarSeries, OHLCV_COLUMNS


@pytest.fixture
def ohlcv_df():
    """Small OHLCV frame with a daily index."""
    dates = pd.date_range('2021-03-01', periods=4, freq='D')
    return pd.DataFrame({
        'Open': [10.0, 11.0, 12.0, 13.0],
        'High': [11.0, 12.0, 13.0, 14.0],
        'Low': [9.0, 10.0, 11.0, 12.0],
        'Close': [10.5, 11.5, 12.5, 13.5],
        'Volume': np.array([100, 200, 300, 400]),
    }, index=dates)


class TestFromDataFrame:
    """Build series from pandas frames."""

    def test_bar_values(self, ohlcv_df):
        series = BarSeries.from_dataframe(ohlcv_df, name="TEST")

        assert series.bar_count == 4
        assert series.name == "TEST"
        bar = series.get_bar(1)
        assert bar.open_price == 11
        assert bar.high_price == 12
        assert bar.low_price == 10
        assert bar.close_price == 11.5
        assert bar.volume == 200
        assert bar.end_time == datetime(2021, 3, 2)

    def test_close_only_frame(self):
        df = pd.DataFrame({'Close': [1.0, 2.0]}, index=pd.date_range('2021-01-01', periods=2))
        series = BarSeries.from_dataframe(df)

        bar = series.get_bar(0)
        assert bar.open_price == bar.high_price == bar.low_price == bar.close_price == 1
        assert bar.volume == 0

    def test_missing_close_column(self):
        df = pd.DataFrame({'Open': [1.0]}, index=pd.date_range('2021-01-01', periods=1))
        with pytest.raises(ValueError, match="'Close' column"):
            BarSeries.from_dataframe(df)

    def test_requires_datetime_index(self):
        df = pd.DataFrame({'Close': [1.0, 2.0]})
        with pytest.raises(ValueError, match="DatetimeIndex"):
            BarSeries.from_dataframe(df)

    def test_requires_increasing_index(self):
        dates = pd.DatetimeIndex(['2021-01-02', '2021-01-01'])
        df = pd.DataFrame({'Close': [1.0, 2.0]}, index=dates)
        with pytest.raises(ValueError, match="strictly increasing"):
            BarSeries.from_dataframe(df)

    def test_decimal_factory(self, ohlcv_df):
        series = BarSeries.from_dataframe(ohlcv_df, num_factory=DecimalNumFactory())

        assert isinstance(series.get_bar(0).close_price, DecimalNum)
        assert series.num_factory.name == "decimal"

    def test_dataframe_round_trip(self, ohlcv_df):
        series = BarSeries.from_dataframe(ohlcv_df)
        df = series.to_dataframe()

        assert list(df.columns) == list(OHLCV_COLUMNS)
        assert df['Close'].tolist() == ohlcv_df['Close'].tolist()
        assert (df.index == ohlcv_df.index).all()


class TestFromClosePrices:
    """Flat bars from a list of closes."""

    def test_daily_bars(self):
        series = BarSeries.from_close_prices([1, 2, 3])

        assert series.bar_count == 3
        assert series.get_bar(2).close_price == 3
        assert series.get_bar(0).end_time == datetime(2020, 1, 1)
        assert series.get_bar(1).end_time == datetime(2020, 1, 2)

    def test_custom_frequency(self):
        series = BarSeries.from_close_prices([1, 2], start="2021-06-01 09:00", freq="h")
        assert series.get_bar(1).end_time == datetime(2021, 6, 1, 10, 0)


class TestIndexing:
    """Bounds and emptiness."""

    def test_indices(self):
        series = BarSeries.from_close_prices([1, 2, 3])

        assert series.begin_index == 0
        assert series.end_index == 2
        assert len(series) == 3
        assert [bar.close_price for bar in series] == [1, 2, 3]

    def test_out_of_range(self):
        series = BarSeries.from_close_prices([1, 2, 3])
        with pytest.raises(IndexError):
            series.get_bar(3)
        with pytest.raises(IndexError):
            series.get_bar(-1)

    def test_empty_series(self):
        series = BarSeries()

        assert series.is_empty()
        assert series.begin_index == -1
        assert series.end_index == -1


class TestValidation:
    """Bars must be ordered and built with the series factory."""

    def _bar(self, factory, day, close=1):
        price = factory.num_of(close)
        return Bar(
            end_time=datetime(2021, 1, day),
            open_price=price,
            high_price=price,
            low_price=price,
            close_price=price,
            volume=factory.zero,
        )

    def test_unordered_bars(self):
        factory = DoubleNumFactory()
        bars = [self._bar(factory, 2), self._bar(factory, 1)]
        with pytest.raises(ValueError, match="ascending end_time"):
            BarSeries(bars, num_factory=factory)

    def test_foreign_factory(self):
        bars = [self._bar(DecimalNumFactory(), 1)]
        with pytest.raises(ValueError, match="was not built with"):
            BarSeries(bars, num_factory=DoubleNumFactory())
