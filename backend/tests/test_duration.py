"""
Curriculum Manager - Duration Normalizer Tests
"""
import pytest

from curriculum_manager.services.duration import (
    DurationUnit,
    change_duration_unit,
    convert_duration,
    display_duration,
    normalize_duration,
    normalize_duration_input,
    parse_duration,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("45 minutes", (45.0, DurationUnit.MINUTES)),
        ("1 hour", (1.0, DurationUnit.HOURS)),
        ("2.5 Days", (2.5, DurationUnit.DAYS)),
        ("3 WEEKS", (3.0, DurationUnit.WEEKS)),
        ("30", (30.0, DurationUnit.MINUTES)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", None, "about an hour", "5 fortnights", "-3 Hours"])
def test_parse_duration_rejects_unparsable(text):
    assert parse_duration(text) is None


@pytest.mark.parametrize(
    "value, unit, expected",
    [
        (45, DurationUnit.MINUTES, "45 Minutes"),
        (90, DurationUnit.MINUTES, "1.5 Hours"),
        (75, DurationUnit.MINUTES, "1.3 Hours"),
        (100, DurationUnit.MINUTES, "1.7 Hours"),
        (2880, DurationUnit.MINUTES, "2 Days"),
        (20160, DurationUnit.MINUTES, "2 Weeks"),
        (0.5, DurationUnit.HOURS, "30 Minutes"),
        (36, DurationUnit.HOURS, "1.5 Days"),
    ],
)
def test_normalize_duration_picks_natural_unit(value, unit, expected):
    assert normalize_duration(value, unit) == expected


def test_normalize_duration_is_idempotent():
    for text in ["45 Minutes", "1.5 Hours", "2 Days", "3 Weeks"]:
        value, unit = parse_duration(text)
        assert normalize_duration(value, unit) == text


def test_convert_duration_rounds_half_up():
    assert convert_duration(1, DurationUnit.HOURS, DurationUnit.MINUTES) == 60
    assert convert_duration(15, DurationUnit.MINUTES, DurationUnit.HOURS) == 0.3
    assert convert_duration(3, DurationUnit.DAYS, DurationUnit.WEEKS) == 0.4


@pytest.mark.parametrize("raw", ["", "   ", "abc", "0", "-5", "0.04", None])
def test_normalize_duration_input_clears_invalid_values(raw):
    assert normalize_duration_input(raw, DurationUnit.MINUTES) == ""


def test_normalize_duration_input_commits_natural_unit():
    assert normalize_duration_input("90", DurationUnit.MINUTES) == "1.5 Hours"
    assert normalize_duration_input(" 2 ", DurationUnit.DAYS) == "2 Days"


def test_change_duration_unit():
    assert change_duration_unit("1.5 Hours", DurationUnit.MINUTES) == "90 Minutes"
    assert change_duration_unit("2 Days", DurationUnit.HOURS) == "48 Hours"
    assert change_duration_unit("", DurationUnit.HOURS) == ""
    assert change_duration_unit("whenever", DurationUnit.HOURS) == ""


def test_display_duration():
    assert display_duration("120 minutes") == "2 Hours"
    assert display_duration("about an hour") == "about an hour"
    assert display_duration("") == ""
