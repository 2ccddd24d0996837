# rentalhub/domain/contracts.py
from __future__ import annotations

import math
import random
import string
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Sequence

from ..errors import FormValidationError
from ..schemas import Booking, Contract, ContractCreate, RoomInfo
from .dates import add_months, calc_end_date, contract_duration, format_date_vn, parse_date, to_iso_z

DEFAULT_TERMS = "Hợp đồng mặc định"
DEFAULT_BOOKING_SPAN = timedelta(days=90)

_BOOKING_ID_ALPHABET = string.digits + string.ascii_uppercase


@dataclass(frozen=True)
class ContractForm:
    """Manual contract form, values exactly as typed."""

    room_id: str = ""
    tenant_id: str = ""
    duration: str = "1"
    rent_price: str = ""
    start_date: str = ""  # YYYY-MM-DD
    terms: str = ""


def _number(v: Any) -> float:
    try:
        n = float(str(v).strip())
    except (TypeError, ValueError):
        return math.nan
    return n


def validate_contract_form(form: ContractForm) -> date:
    """First failing rule wins; nothing is sent when this raises. Returns the parsed start date."""
    if not form.room_id.strip():
        raise FormValidationError("Vui lòng nhập mã phòng (VD: room202).", field="room_id")
    if not form.tenant_id.strip():
        raise FormValidationError("Vui lòng nhập tenantId (VD: user_6294f45f).", field="tenant_id")

    duration = _number(form.duration)
    if not math.isfinite(duration) or duration <= 0 or duration != int(duration):
        raise FormValidationError("Thời hạn (tháng) phải > 0.", field="duration")

    rent = _number(form.rent_price)
    if not math.isfinite(rent) or rent <= 0:
        raise FormValidationError("Giá thuê (VNĐ/tháng) phải > 0.", field="rent_price")

    start = parse_date(form.start_date)
    if start is None:
        raise FormValidationError("Vui lòng chọn ngày bắt đầu.", field="start_date")
    if not form.terms.strip():
        raise FormValidationError("Vui lòng nhập điều khoản hợp đồng.", field="terms")
    return start


def gen_booking_id(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """BK-YYYYMMDDHHMMSS-XXXX, used when a contract is not backed by a booking."""
    now = now or datetime.now()
    rng = rng or random.Random()
    suffix = "".join(rng.choice(_BOOKING_ID_ALPHABET) for _ in range(4))
    return f"BK-{now.strftime('%Y%m%d%H%M%S')}-{suffix}"


def build_contract_payload(
    form: ContractForm,
    *,
    booking_id: Optional[str] = None,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> ContractCreate:
    start = validate_contract_form(form)
    duration = int(_number(form.duration))

    return ContractCreate(
        room_id=form.room_id.strip(),
        tenant_id=form.tenant_id.strip(),
        duration=duration,
        rent_price=_number(form.rent_price),
        terms=form.terms.strip(),
        start_date=to_iso_z(start),
        end_date=calc_end_date(start, duration),
        booking_id=booking_id or gen_booking_id(now, rng),
    )


def monthly_price(room: Optional[RoomInfo]) -> float:
    """Room price is either a plain number or {value, unit}."""
    if room is None:
        return 0.0
    price = room.price
    if isinstance(price, dict):
        price = price.get("value")
    n = _number(price) if price is not None else 0.0
    return n if math.isfinite(n) else 0.0


def contract_from_booking(
    booking: Booking,
    *,
    room: Optional[RoomInfo] = None,
    now: Optional[datetime] = None,
) -> ContractCreate:
    """
    Contract for an approved booking.

    - duration: whole months between the booking dates, at least 1
    - rentPrice: monthly room price x duration (snapshot, never re-derived)
    - missing start -> now, missing end -> start + 90 days
    """
    now = now or datetime.now(timezone.utc)
    start_raw = booking.start_date or to_iso_z(now)
    end_raw = booking.end_date or to_iso_z((parse_date(start_raw) or now.date()) + DEFAULT_BOOKING_SPAN)

    start = parse_date(start_raw)
    end = parse_date(end_raw)
    if start is None or end is None:
        raise FormValidationError("Ngày thuê không hợp lệ.", field="start_date")

    if not booking.room_id or not booking.tenant_id:
        raise FormValidationError("Yêu cầu thuê thiếu roomId hoặc tenantId.", field="booking")

    duration = contract_duration(start, end)
    rent_price = monthly_price(room or booking.room_info) * duration
    if not math.isfinite(rent_price) or rent_price <= 0:
        raise FormValidationError("Giá thuê (VNĐ/tháng) phải > 0.", field="rent_price")

    return ContractCreate(
        room_id=booking.room_id,
        tenant_id=booking.tenant_id,
        duration=duration,
        rent_price=rent_price,
        terms=DEFAULT_TERMS,
        start_date=start_raw,
        end_date=end_raw,
        booking_id=booking.key or gen_booking_id(now),
    )


@dataclass(frozen=True)
class ContractRow:
    id: Optional[str]
    title: str
    tenant_name: str
    phone: str
    room_id: Optional[str]
    start_date: str
    end_date: str
    monthly_rate: float
    terms: str
    status: str
    location: str
    tenant_id: str


def map_contracts(contracts: Sequence[Contract]) -> list[ContractRow]:
    """List rows; the end date shown is start + duration months."""
    rows: list[ContractRow] = []
    for c in contracts:
        start = parse_date(c.start_date or c.contract_date)
        months = int(c.duration) if c.duration and math.isfinite(c.duration) else 0
        end = add_months(start, months) if start and months > 0 else None
        monthly = float(c.rent_price or 0) / months if months > 0 else 0.0

        rows.append(
            ContractRow(
                id=c.contract_id,
                title=(c.room_info.room_title if c.room_info else None) or "",
                tenant_name=(c.tenant_info.full_name if c.tenant_info else None) or "",
                phone=(c.tenant_info.phone if c.tenant_info else None) or "",
                room_id=c.room_id,
                start_date=format_date_vn(start),
                end_date=format_date_vn(end),
                monthly_rate=monthly,
                terms=c.terms or "",
                status=c.status or "",
                location=(c.room_info.location if c.room_info else None) or "",
                tenant_id=c.tenant_id or "",
            )
        )
    return rows
