# rentalhub/domain/dates.py
from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

_BILLING_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def parse_date(v: Any) -> Optional[date]:
    """
    Accepts date, datetime, "YYYY-MM-DD" or a full ISO timestamp ("...Z" included).
    Aware timestamps are read in UTC. Returns None for blanks and garbage.
    """
    if v is None:
        return None
    if isinstance(v, datetime):
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc)
        return v.date()
    if isinstance(v, date):
        return v

    s = str(v).strip()
    if not s:
        return None
    try:
        if len(s) == 10:
            return date.fromisoformat(s)
        return parse_date(datetime.fromisoformat(s.replace("Z", "+00:00")))
    except ValueError:
        return None


def add_months(d: date, months: int) -> date:
    """
    Calendar month arithmetic with day overflow rolling forward, the way a
    JavaScript Date behaves after setMonth():

        2024-01-31 + 1 -> 2024-03-02   (Feb 2024 has 29 days)
        2023-11-15 + 3 -> 2024-02-15
    """
    idx = d.month - 1 + int(months)
    year = d.year + idx // 12
    month = idx % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    if d.day <= last_day:
        return d.replace(year=year, month=month)
    return date(year, month, last_day) + timedelta(days=d.day - last_day)


def month_span(start: date, end: date) -> int:
    """Whole months from start to end; one less when end's day-of-month precedes start's."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return months


def contract_duration(start: date, end: date) -> int:
    """Booking span in months, never below 1."""
    return max(month_span(start, end), 1)


def to_iso_z(v: date) -> str:
    """UTC ISO timestamp with millisecond precision: 2024-04-01T00:00:00.000Z."""
    if isinstance(v, datetime):
        dt = v.astimezone(timezone.utc) if v.tzinfo is not None else v
    else:
        dt = datetime(v.year, v.month, v.day)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def calc_end_date(start: Any, duration: int) -> str:
    d = parse_date(start)
    if d is None:
        raise ValueError(f"invalid start date: {start!r}")
    return to_iso_z(add_months(d, duration))


def is_billing_month(v: Optional[str]) -> bool:
    return bool(v) and bool(_BILLING_MONTH_RE.match(str(v)))


def current_billing_month(today: Optional[date] = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"{today.year:04d}-{today.month:02d}"


def format_date_vn(v: Any) -> str:
    d = parse_date(v)
    return d.strftime("%d/%m/%Y") if d else ""


def parse_datetime(v: Any) -> Optional[datetime]:
    """Full timestamps as aware UTC datetimes; naive input is taken as UTC. None for garbage."""
    if isinstance(v, datetime):
        dt = v
    elif isinstance(v, date):
        dt = datetime(v.year, v.month, v.day)
    else:
        s = str(v or "").strip()
        if not s:
            return None
        try:
            dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
