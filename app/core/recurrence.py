"""
Recurrence rules.

Rows store the pattern as text and the custom weekdays as a JSON string. Both
are decoded here into one of the small Recurrence variants below, and only the
CUSTOM variant carries weekdays. Weekday indices use Sunday=0 .. Saturday=6.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Union

from app.models.recurring_task import RecurringTask

logger = logging.getLogger("app.recurrence")

DAILY = "DAILY"
WEEKDAYS = "WEEKDAYS"
WEEKLY = "WEEKLY"
CUSTOM = "CUSTOM"

PATTERNS = (DAILY, WEEKDAYS, WEEKLY, CUSTOM)


class InvalidRecurrence(ValueError):
    pass


@dataclass(frozen=True)
class DailyRecurrence:
    def matches(self, weekday: int) -> bool:
        return True


@dataclass(frozen=True)
class WeekdaysRecurrence:
    def matches(self, weekday: int) -> bool:
        return 1 <= weekday <= 5


@dataclass(frozen=True)
class WeeklyRecurrence:
    # not pinned to a weekday yet: shows up every day
    def matches(self, weekday: int) -> bool:
        return True


@dataclass(frozen=True)
class CustomRecurrence:
    days: frozenset[int]

    def matches(self, weekday: int) -> bool:
        return weekday in self.days


@dataclass(frozen=True)
class UnknownRecurrence:
    pattern: str

    def matches(self, weekday: int) -> bool:
        return False


Recurrence = Union[
    DailyRecurrence,
    WeekdaysRecurrence,
    WeeklyRecurrence,
    CustomRecurrence,
    UnknownRecurrence,
]


def weekday_index(day: date) -> int:
    """Sunday=0 .. Saturday=6 (date.weekday() is Monday=0)."""
    return (day.weekday() + 1) % 7


def encode_days_of_week(days: Iterable[int]) -> str:
    return json.dumps(sorted(set(days)))


def decode_days_of_week(raw: str | None) -> frozenset[int]:
    if not raw:
        raise InvalidRecurrence("daysOfWeek is missing")
    try:
        parsed = json.loads(raw)
    except ValueError as e:
        raise InvalidRecurrence(f"daysOfWeek is not JSON: {raw!r}") from e

    if not isinstance(parsed, list) or not parsed:
        raise InvalidRecurrence(f"daysOfWeek must be a non-empty array: {raw!r}")

    days: set[int] = set()
    for item in parsed:
        # bool is an int subclass; true/false are not weekdays
        if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= 6:
            raise InvalidRecurrence(f"daysOfWeek has an invalid weekday: {item!r}")
        days.add(item)
    return frozenset(days)


def parse_recurrence(pattern: str, days_of_week: str | None) -> Recurrence:
    if pattern == DAILY:
        return DailyRecurrence()
    if pattern == WEEKDAYS:
        return WeekdaysRecurrence()
    if pattern == WEEKLY:
        return WeeklyRecurrence()
    if pattern == CUSTOM:
        return CustomRecurrence(decode_days_of_week(days_of_week))
    return UnknownRecurrence(pattern)


def should_appear(rule: RecurringTask, day: date) -> bool:
    if not rule.is_active:
        return False
    try:
        recurrence = parse_recurrence(rule.recurrence_pattern, rule.days_of_week)
    except InvalidRecurrence as e:
        logger.warning("Skipping recurring task %s: %s", rule.id, e)
        return False
    return recurrence.matches(weekday_index(day))
