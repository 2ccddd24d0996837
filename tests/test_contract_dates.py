# tests/test_contract_dates.py
from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from rentalhub.domain.dates import (
    add_months,
    calc_end_date,
    contract_duration,
    current_billing_month,
    format_date_vn,
    is_billing_month,
    month_span,
    parse_date,
)


def test_add_months_rolls_over_year():
    assert add_months(date(2023, 11, 15), 3) == date(2024, 2, 15)
    assert add_months(date(2024, 12, 1), 1) == date(2025, 1, 1)
    assert add_months(date(2024, 1, 1), 24) == date(2026, 1, 1)


def test_add_months_day_overflow_moves_forward():
    # Feb 2024 has 29 days: Jan 31 + 1 month lands on Mar 2
    assert add_months(date(2024, 1, 31), 1) == date(2024, 3, 2)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 3, 3)


def test_calc_end_date_format():
    assert calc_end_date("2024-01-01", 3) == "2024-04-01T00:00:00.000Z"
    assert calc_end_date("2023-11-15", 3) == "2024-02-15T00:00:00.000Z"


def test_calc_end_date_rejects_garbage():
    with pytest.raises(ValueError):
        calc_end_date("not-a-date", 3)


@pytest.mark.parametrize("start", ["2024-01-01", "2023-11-15", "2024-06-30"])
@pytest.mark.parametrize("n", [1, 3, 12, 25])
def test_month_span_inverts_calc_end_date(start, n):
    assert month_span(parse_date(start), parse_date(calc_end_date(start, n))) == n


def test_contract_duration_never_below_one():
    assert contract_duration(date(2024, 1, 1), date(2024, 1, 20)) == 1
    assert contract_duration(date(2024, 1, 15), date(2024, 4, 14)) == 2
    assert contract_duration(date(2024, 1, 15), date(2024, 4, 15)) == 3


def test_parse_date_accepts_iso_z_and_rejects_blanks():
    assert parse_date("2024-04-01T00:00:00.000Z") == date(2024, 4, 1)
    assert parse_date(datetime(2024, 4, 1, 23, 30, tzinfo=timezone.utc)) == date(2024, 4, 1)
    assert parse_date("") is None
    assert parse_date("31/12/2024") is None


def test_billing_month_helpers():
    assert current_billing_month(date(2024, 3, 9)) == "2024-03"
    assert is_billing_month("2024-12")
    assert not is_billing_month("2024-13")
    assert format_date_vn("2024-04-01") == "01/04/2024"
    assert format_date_vn(None) == ""
