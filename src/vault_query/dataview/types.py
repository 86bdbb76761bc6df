"""
Value types for Dataview query evaluation.

Every value flowing through the index and the executor is one of:
None, bool, int/float, str, Date, Duration, Link, list or dict.
"""

import calendar
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional, Union

# Approximate conversion constants (seconds)
SECS_PER_MINUTE = 60
SECS_PER_HOUR = 3600
SECS_PER_DAY = 86400
SECS_PER_WEEK = 7 * SECS_PER_DAY
SECS_PER_MONTH = 30.44 * SECS_PER_DAY
SECS_PER_YEAR = 365.25 * SECS_PER_DAY


@dataclass(frozen=True, eq=False)
class Duration:
    """A bag of calendar unit counts.

    Comparison goes through an approximate total-seconds conversion
    (a month is 30.44 days, a year 365.25 days).
    """

    years: float = 0
    months: float = 0
    weeks: float = 0
    days: float = 0
    hours: float = 0
    minutes: float = 0
    seconds: float = 0

    UNITS = {
        "year": "years",
        "years": "years",
        "yr": "years",
        "yrs": "years",
        "month": "months",
        "months": "months",
        "mo": "months",
        "mos": "months",
        "week": "weeks",
        "weeks": "weeks",
        "wk": "weeks",
        "wks": "weeks",
        "day": "days",
        "days": "days",
        "hour": "hours",
        "hours": "hours",
        "hr": "hours",
        "hrs": "hours",
        "minute": "minutes",
        "minutes": "minutes",
        "min": "minutes",
        "mins": "minutes",
        "second": "seconds",
        "seconds": "seconds",
        "sec": "seconds",
        "secs": "seconds",
    }

    PAIR_PATTERN = re.compile(r"(\d+)\s+([A-Za-z]+)")

    @classmethod
    def parse(cls, text: Any) -> Optional["Duration"]:
        """Parse strings like "7 days", "1 year, 3 months" or "30 mins".

        Returns None when nothing matches or a unit is unknown.
        """
        if not isinstance(text, str):
            return None
        text = text.strip()
        if not text:
            return None

        spec: dict[str, int] = {}
        for amount, unit in cls.PAIR_PATTERN.findall(text):
            key = cls.UNITS.get(unit.lower())
            if key is None:
                return None
            spec[key] = spec.get(key, 0) + int(amount)

        if not spec:
            return None
        return cls(**spec)

    def to_seconds(self) -> float:
        """Approximate total seconds, for comparison only."""
        return (
            self.years * SECS_PER_YEAR
            + self.months * SECS_PER_MONTH
            + self.weeks * SECS_PER_WEEK
            + self.days * SECS_PER_DAY
            + self.hours * SECS_PER_HOUR
            + self.minutes * SECS_PER_MINUTE
            + self.seconds
        )

    def negated(self) -> "Duration":
        return Duration(
            years=-self.years,
            months=-self.months,
            weeks=-self.weeks,
            days=-self.days,
            hours=-self.hours,
            minutes=-self.minutes,
            seconds=-self.seconds,
        )

    def __add__(self, other: "Duration") -> "Duration":
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(
            years=self.years + other.years,
            months=self.months + other.months,
            weeks=self.weeks + other.weeks,
            days=self.days + other.days,
            hours=self.hours + other.hours,
            minutes=self.minutes + other.minutes,
            seconds=self.seconds + other.seconds,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self.to_seconds() == other.to_seconds()

    def __lt__(self, other: "Duration") -> bool:
        return self.to_seconds() < other.to_seconds()

    def __hash__(self) -> int:
        return hash(self.to_seconds())

    def __str__(self) -> str:
        parts = []
        for label, value in (
            ("year", self.years),
            ("month", self.months),
            ("week", self.weeks),
            ("day", self.days),
            ("hour", self.hours),
            ("minute", self.minutes),
            ("second", self.seconds),
        ):
            if value == 0:
                continue
            amount = format_number(value)
            parts.append(f"{amount} {label}" if value == 1 else f"{amount} {label}s")
        if not parts:
            return "0 seconds"
        return ", ".join(parts)


MONTH_NAMES = {name.lower(): index for index, name in enumerate(calendar.month_name) if name}


@dataclass(frozen=True, order=True)
class Date:
    """Calendar date with an optional time of day.

    Fields are always normalized, so field-wise ordering is chronological.
    """

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
    ISO_DATETIME = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})(?::(\d{2}))?$")
    LONG_FORM = re.compile(r"^([A-Za-z]+)\s+(\d+),?\s+(\d{4})$")

    @classmethod
    def from_datetime(cls, value: datetime) -> "Date":
        return cls(value.year, value.month, value.day, value.hour, value.minute, value.second)

    @classmethod
    def today(cls) -> "Date":
        now = datetime.now()
        return cls(now.year, now.month, now.day)

    @classmethod
    def now(cls) -> "Date":
        return cls.from_datetime(datetime.now())

    @classmethod
    def parse(cls, text: Any) -> Optional["Date"]:
        """Parse a date string.

        Supported formats:
            "2026-02-18"
            "2026-02-18T10:30" / "2026-02-18T10:30:00"
            "February 18, 2026"
            "today", "tomorrow", "yesterday", "now"
            "sow" (Monday of this week), "eow" (the coming Sunday)

        Returns None on anything else, including out-of-range components.
        """
        if not isinstance(text, str):
            return None
        text = text.strip()
        lower = text.lower()

        if lower == "today":
            return cls.today()
        if lower == "now":
            return cls.now()
        if lower == "tomorrow":
            return cls.today().plus(Duration(days=1))
        if lower == "yesterday":
            return cls.today().minus(Duration(days=1))
        if lower == "sow":
            today = cls.today()
            return today.minus(Duration(days=today.to_datetime().weekday()))
        if lower == "eow":
            today = cls.today()
            days_until_sunday = (6 - today.to_datetime().weekday()) % 7 or 7
            return today.plus(Duration(days=days_until_sunday))

        try:
            match = cls.ISO_DATETIME.match(text)
            if match:
                year, month, day, hour, minute, second = match.groups()
                return cls._checked(
                    int(year), int(month), int(day), int(hour), int(minute), int(second or 0)
                )

            match = cls.ISO_DATE.match(text)
            if match:
                year, month, day = match.groups()
                return cls._checked(int(year), int(month), int(day))
        except ValueError:
            return None

        match = cls.LONG_FORM.match(text)
        if match:
            month_name, day, year = match.groups()
            month = MONTH_NAMES.get(month_name.lower())
            if month is not None:
                try:
                    return cls._checked(int(year), month, int(day))
                except ValueError:
                    return None

        return None

    @classmethod
    def _checked(cls, year, month, day, hour=0, minute=0, second=0) -> "Date":
        # datetime() raises ValueError on out-of-range components
        return cls.from_datetime(datetime(year, month, day, hour, minute, second))

    def to_datetime(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour, self.minute, self.second)

    def format(self, fmt: str) -> str:
        """Format with strftime directives."""
        return self.to_datetime().strftime(fmt)

    def plus(self, duration: Duration) -> "Date":
        """Add a Duration.

        Year/month offsets are applied first with the day clamped to the
        target month (Jan 31 + 1 month = Feb 28); the remaining units are a
        flat time delta.
        """
        month_index = self.month - 1 + int(duration.months)
        year = self.year + int(duration.years) + month_index // 12
        month = month_index % 12 + 1
        day = min(self.day, calendar.monthrange(year, month)[1])

        shifted = datetime(year, month, day, self.hour, self.minute, self.second) + timedelta(
            weeks=duration.weeks,
            days=duration.days,
            hours=duration.hours,
            minutes=duration.minutes,
            seconds=duration.seconds,
        )
        return Date.from_datetime(shifted)

    def minus(self, other: Union[Duration, "Date"]) -> Union["Date", Duration]:
        """Subtract a Duration (giving a Date) or a Date (giving elapsed seconds)."""
        if isinstance(other, Duration):
            return self.plus(other.negated())
        if isinstance(other, Date):
            elapsed = self.to_datetime() - other.to_datetime()
            return Duration(seconds=int(elapsed.total_seconds()))
        raise TypeError(f"cannot subtract {typename(other)} from a date")

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class Link:
    """A reference to another note. Equality and hashing use the path only."""

    path: str
    display: Optional[str] = field(default=None, compare=False)
    embed: bool = field(default=False, compare=False)

    def __str__(self) -> str:
        prefix = "!" if self.embed else ""
        if self.display:
            return f"{prefix}[[{self.path}|{self.display}]]"
        return f"{prefix}[[{self.path}]]"


Value = Union[None, bool, int, float, str, Date, Duration, Link, list, dict]


def typename(value: Any) -> str:
    """Descriptive type name used by typeof() and cross-type ordering."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Date):
        return "date"
    if isinstance(value, Duration):
        return "duration"
    if isinstance(value, Link):
        return "link"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def truthy(value: Any) -> bool:
    """Only None and False are falsy. 0, "" and empty collections are truthy."""
    return value is not None and value is not False


NUMBER_PATTERN = re.compile(r"^\s*-?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?\s*$")


def to_number(value: Any) -> Optional[Union[int, float]]:
    """Coerce to a number the way query arithmetic expects; None if not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and NUMBER_PATTERN.match(value):
        stripped = value.strip()
        try:
            return int(stripped)
        except ValueError:
            return float(stripped)
    return None


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float):
        if math.isfinite(value) and value == int(value):
            return str(int(value))
        return format(value, ".14g")
    return str(value)


def to_string(value: Any) -> str:
    """String form of a value, used for display, concatenation and loose equality."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(to_string(item) for item in value)
    if isinstance(value, dict):
        inner = ", ".join(f"{key}: {to_string(item)}" for key, item in value.items())
        return "{" + inner + "}"
    return str(value)


def equals(a: Any, b: Any) -> bool:
    """Loose equality: Links by path, Dates by instant, else by string form."""
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    if isinstance(a, Link) and isinstance(b, Link):
        return a.path == b.path
    if isinstance(a, Date) and isinstance(b, Date):
        return a == b
    return to_string(a) == to_string(b)


def _sign(a: Any, b: Any) -> int:
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def compare(a: Any, b: Any) -> int:
    """Total three-way comparison returning -1, 0 or 1.

    None sorts before everything. Same-typed values use their natural order
    (case-insensitive for strings and link paths); differently typed values
    are ordered by type name.
    """
    if a is None and b is None:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1

    type_a = typename(a)
    type_b = typename(b)
    if type_a != type_b:
        return _sign(type_a, type_b)

    if type_a in ("number", "boolean", "date"):
        return _sign(a, b)
    if type_a == "string":
        return _sign(a.lower(), b.lower())
    if type_a == "duration":
        return _sign(a.to_seconds(), b.to_seconds())
    if type_a == "link":
        return _sign(a.path.lower(), b.path.lower())
    return _sign(to_string(a), to_string(b))
