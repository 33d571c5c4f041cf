from datetime import date

import pytest

from periods import PeriodKey, add_months, resolve_period


def test_period_bounds_and_neighbours():
    feb = PeriodKey.parse("2024-02")
    assert feb.start == date(2024, 2, 1)
    assert feb.end == date(2024, 2, 29)
    assert feb.previous() == PeriodKey(2024, 1)
    assert PeriodKey(2024, 12).next() == PeriodKey(2025, 1)
    assert PeriodKey(2024, 1).previous() == PeriodKey(2023, 12)
    assert str(PeriodKey(2024, 3)) == "2024-03"
    assert PeriodKey(2024, 3) > PeriodKey(2023, 12)


def test_contains_uses_plain_calendar_dates():
    march = PeriodKey(2024, 3)
    assert march.contains(date(2024, 3, 1))
    assert march.contains(date(2024, 3, 31))
    assert not march.contains(date(2024, 2, 29))
    assert not march.contains(date(2024, 4, 1))


def test_parse_rejects_malformed_months():
    for value in ("2024-13", "2024-3", "0000-01", "March", ""):
        with pytest.raises(ValueError):
            PeriodKey.parse(value)


def test_resolve_period_defaults_to_today():
    assert resolve_period(None, today=date(2024, 7, 14)) == PeriodKey(2024, 7)
    assert resolve_period("2023-11") == PeriodKey(2023, 11)


def test_add_months_snaps_to_shorter_months():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
    assert add_months(date(2024, 5, 15), -5) == date(2023, 12, 15)
