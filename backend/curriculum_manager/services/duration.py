"""
Curriculum Manager - Duration Normalizer
Durations are stored as free text ``"<number> <Unit>"``; these helpers parse,
convert and pick a natural unit for them. Nothing canonical is persisted:
every call recomputes from the string currently shown.
"""
import math
import re
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class DurationUnit(str, Enum):
    """Units offered by the duration selector."""
    MINUTES = "Minutes"
    HOURS = "Hours"
    DAYS = "Days"
    WEEKS = "Weeks"

    @property
    def minutes(self) -> int:
        return _UNIT_MINUTES[self]


_UNIT_MINUTES = {
    DurationUnit.MINUTES: 1,
    DurationUnit.HOURS: 60,
    DurationUnit.DAYS: 1440,
    DurationUnit.WEEKS: 10080,
}

_UNIT_WORDS = {
    "minute": DurationUnit.MINUTES,
    "min": DurationUnit.MINUTES,
    "hour": DurationUnit.HOURS,
    "hr": DurationUnit.HOURS,
    "day": DurationUnit.DAYS,
    "week": DurationUnit.WEEKS,
    "wk": DurationUnit.WEEKS,
}

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z]*)\s*$")


def round_one_decimal(value: float) -> float:
    """Round half up to one decimal place."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def format_number(value: float) -> str:
    """Render 2.0 as "2" and 1.5 as "1.5"."""
    if value == int(value):
        return str(int(value))
    return str(value)


def format_duration(value: float, unit: DurationUnit) -> str:
    return f"{format_number(value)} {unit.value}"


def parse_unit(word: str) -> DurationUnit | None:
    """Match a unit word, ignoring case and plural forms."""
    word = word.strip().lower()
    if not word:
        return None
    if word.endswith("s"):
        word = word[:-1]
    return _UNIT_WORDS.get(word)


def parse_duration(text: str | None) -> tuple[float, DurationUnit] | None:
    """
    Split a stored duration into value and unit.

    A bare number counts as minutes. Returns None for empty text, unknown
    units or anything that is not ``<number> <unit>``.
    """
    if not text:
        return None
    match = _DURATION_RE.match(text)
    if not match:
        return None
    number, word = match.groups()
    if not word:
        return float(number), DurationUnit.MINUTES
    unit = parse_unit(word)
    if unit is None:
        return None
    return float(number), unit


def unit_of(text: str | None, default: DurationUnit = DurationUnit.MINUTES) -> DurationUnit:
    """Unit the selector should show for a stored duration."""
    parsed = parse_duration(text)
    return parsed[1] if parsed else default


def convert_duration(value: float, from_unit: DurationUnit, to_unit: DurationUnit) -> float:
    """Convert between units, rounded to one decimal place."""
    return round_one_decimal(value * from_unit.minutes / to_unit.minutes)


def natural_unit(minutes: float) -> DurationUnit:
    """Largest unit in which the duration is at least 1."""
    if minutes < 60:
        return DurationUnit.MINUTES
    if minutes < 1440:
        return DurationUnit.HOURS
    if minutes < 10080:
        return DurationUnit.DAYS
    return DurationUnit.WEEKS


def normalize_duration(value: float, unit: DurationUnit = DurationUnit.MINUTES) -> str:
    """
    Express a duration in its natural unit.

    90 Minutes -> "1.5 Hours", 0.5 Hours -> "30 Minutes", 2 Hours -> "2 Hours".
    """
    target = natural_unit(value * unit.minutes)
    return format_duration(convert_duration(value, unit, target), target)


def normalize_duration_input(raw: str | None, unit: DurationUnit = DurationUnit.MINUTES) -> str:
    """
    Commit value for a typed duration.

    Empty, non-numeric or non-positive input clears the duration (returns
    ``""``) instead of storing zero, as does input that rounds to zero.
    """
    if raw is None:
        return ""
    try:
        value = float(raw.strip())
    except ValueError:
        return ""
    if not math.isfinite(value) or value <= 0:
        return ""
    target = natural_unit(value * unit.minutes)
    converted = convert_duration(value, unit, target)
    if converted <= 0:
        return ""
    return format_duration(converted, target)


def change_duration_unit(current: str | None, new_unit: DurationUnit) -> str:
    """Re-express the stored duration in the newly selected unit."""
    parsed = parse_duration(current)
    if parsed is None:
        return ""
    value, unit = parsed
    return format_duration(convert_duration(value, unit, new_unit), new_unit)


def display_duration(text: str | None) -> str:
    """Natural-unit rendering of a stored duration; unparsable text is returned as is."""
    parsed = parse_duration(text)
    if parsed is None:
        return text or ""
    return normalize_duration(*parsed)
