"""
Calendar rules: membership tests on the bar end time.

Each rule reads a DateTimeIndicator and checks one calendar unit against a
set of allowed values. Values are validated at construction and duplicates
are dropped.
"""
from abc import abstractmethod
from dataclasses import dataclass
from datetime import time
from enum import IntEnum
from typing import FrozenSet, Iterable, Sequence, Tuple

from .base import Rule
from ..indicators import DateTimeIndicator


class DayOfWeek(IntEnum):
    """Day of week with datetime.weekday() numbering (Monday = 0)."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


def _unique(values: Iterable) -> Tuple:
    """Drop duplicates, keep first-seen order."""
    return tuple(dict.fromkeys(values))


class _CalendarRule(Rule):
    def __init__(self, date_time_indicator: DateTimeIndicator):
        if date_time_indicator is None:
            raise ValueError(f"{self.TYPE_NAME} requires a date-time indicator")
        super().__init__()
        self.date_time_indicator = date_time_indicator

    @abstractmethod
    def _matches(self, index: int) -> bool:
        pass

    def is_satisfied(self, index: int, trading_record=None) -> bool:
        if self.date_time_indicator.series.is_empty():
            return self.trace(index, False)
        return self.trace(index, self._matches(index))


@dataclass(frozen=True)
class TimeRange:
    """
    Inclusive time-of-day range.

    A range whose end is before its start wraps over midnight
    (22:00-02:00 contains 23:30 and 01:00).
    """
    start: time
    end: time

    def __post_init__(self):
        if not isinstance(self.start, time) or not isinstance(self.end, time):
            raise ValueError(f"TimeRange bounds must be datetime.time, got {self.start!r}, {self.end!r}")

    def contains(self, value: time) -> bool:
        if self.start <= self.end:
            return self.start <= value <= self.end
        return value >= self.start or value <= self.end


class TimeRangeRule(_CalendarRule):
    """Bar end time of day lies in any of the ranges."""

    TYPE_NAME = "TimeRangeRule"

    def __init__(self, ranges: Sequence[TimeRange], date_time_indicator: DateTimeIndicator):
        super().__init__(date_time_indicator)
        if not ranges:
            raise ValueError("TimeRangeRule requires at least one time range")
        self.time_ranges: Tuple[TimeRange, ...] = _unique(ranges)

    def _matches(self, index: int) -> bool:
        value = self.date_time_indicator.get_value(index).time()
        return any(r.contains(value) for r in self.time_ranges)


class DayOfWeekRule(_CalendarRule):
    """Bar end time falls on one of the given days."""

    TYPE_NAME = "DayOfWeekRule"

    def __init__(self, date_time_indicator: DateTimeIndicator, *days_of_week):
        super().__init__(date_time_indicator)
        if not days_of_week:
            raise ValueError("DayOfWeekRule requires at least one day of week")
        days = []
        for day in days_of_week:
            try:
                days.append(DayOfWeek[day.upper()] if isinstance(day, str) else DayOfWeek(day))
            except (KeyError, ValueError):
                raise ValueError(f"Day of week must be MONDAY-SUNDAY or 0-6, got {day!r}")
        self.days_of_week: Tuple[DayOfWeek, ...] = _unique(days)
        self._day_set: FrozenSet[int] = frozenset(self.days_of_week)

    def _matches(self, index: int) -> bool:
        return self.date_time_indicator.get_value(index).weekday() in self._day_set


class _UnitRule(_CalendarRule):
    """Integer calendar unit restricted to [0, UPPER]."""

    UNIT = ""
    UPPER = 0

    def __init__(self, date_time_indicator: DateTimeIndicator, *values: int):
        super().__init__(date_time_indicator)
        if not values:
            raise ValueError(f"{self.TYPE_NAME} requires at least one value")
        for value in values:
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= self.UPPER:
                raise ValueError(f"{self.UNIT} must be in range 0-{self.UPPER}, got {value!r}")
        self.values: Tuple[int, ...] = _unique(values)
        self._value_set: FrozenSet[int] = frozenset(self.values)

    @abstractmethod
    def _unit(self, index: int) -> int:
        pass

    def _matches(self, index: int) -> bool:
        return self._unit(index) in self._value_set


class HourOfDayRule(_UnitRule):
    """Bar end hour is one of the given hours."""

    TYPE_NAME = "HourOfDayRule"
    UNIT = "Hour of day"
    UPPER = 23

    @property
    def hours(self) -> Tuple[int, ...]:
        return self.values

    def _unit(self, index: int) -> int:
        return self.date_time_indicator.get_value(index).hour


class MinuteOfHourRule(_UnitRule):
    """Bar end minute is one of the given minutes."""

    TYPE_NAME = "MinuteOfHourRule"
    UNIT = "Minute of hour"
    UPPER = 59

    @property
    def minutes(self) -> Tuple[int, ...]:
        return self.values

    def _unit(self, index: int) -> int:
        return self.date_time_indicator.get_value(index).minute
