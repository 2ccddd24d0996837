# rentalhub/schemas.py
from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python; unknown fields are kept."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class WriteModel(ApiModel):
    # Outbound payloads: never forward stray fields
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# -------------------- Users / Auth --------------------

class User(ApiModel):
    user_id: Optional[str] = None
    id: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None  # admin | host | tenant | guest
    status: Optional[str] = None  # active | inactive | pending
    created_at: Optional[str] = None

    @property
    def key(self) -> Optional[str]:
        return self.user_id or self.id


class LoginResult(ApiModel):
    token: str
    user: User


class PasswordChange(WriteModel):
    current_password: str
    new_password: str


# -------------------- Rooms / Approvals --------------------

class RoomInfo(ApiModel):
    room_id: Optional[str] = None
    room_title: Optional[str] = None
    location: Optional[str] = None
    price: Any = None  # number, or {value, unit}
    status: Optional[str] = None
    room_type: Optional[str] = None
    host_id: Optional[str] = None


class Room(RoomInfo):
    area: Optional[float] = None
    description: Optional[str] = None
    terms: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


RoomStatus = Literal["available", "rented", "maintenance"]


class Approval(ApiModel):
    approval_id: Optional[str] = None
    room_id: Optional[str] = None
    approval_status: Optional[str] = None  # pending | approved | rejected
    note: Optional[str] = None
    created_at: Optional[str] = None


# -------------------- Bookings --------------------

class Booking(ApiModel):
    booking_id: Optional[str] = None
    id: Optional[str] = None
    room_id: Optional[str] = None
    tenant_id: Optional[str] = None
    status: Optional[str] = None  # pending | approved | rejected | cancelled
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[str] = None
    room_info: Optional[RoomInfo] = None
    tenant_info: Optional[User] = None

    @property
    def key(self) -> Optional[str]:
        return self.booking_id or self.id


class BookingCreate(WriteModel):
    room_id: str
    start_date: str
    end_date: str
    note: Optional[str] = None


# -------------------- Contracts --------------------

class Contract(ApiModel):
    contract_id: Optional[str] = None
    room_id: Optional[str] = None
    tenant_id: Optional[str] = None
    duration: Optional[float] = None  # months
    rent_price: Optional[float] = None  # total for the whole duration
    terms: Optional[str] = None
    start_date: Optional[str] = None
    contract_date: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[str] = None  # pending | active | expired | terminated | cancel
    booking_id: Optional[str] = None
    note: Optional[str] = None
    room_info: Optional[RoomInfo] = None
    tenant_info: Optional[User] = None


class ContractCreate(WriteModel):
    room_id: str
    tenant_id: str
    duration: int
    rent_price: float
    terms: str
    start_date: str
    end_date: str
    booking_id: str


# -------------------- Invoices --------------------

class InvoiceItem(ApiModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    type: str = "room"
    unit_price: float = 0.0
    quantity: float = 1.0
    note: str = ""

    @field_validator("unit_price", "quantity", mode="before")
    @classmethod
    def _blank_is_zero(cls, v: Any) -> Any:
        # form inputs start out as "" before the host types a number
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0.0
        return v

    @field_validator("note", mode="before")
    @classmethod
    def _none_note(cls, v: Any) -> Any:
        return "" if v is None else v


InvoiceStatus = Literal["pending", "paid", "unpaid"]


class Invoice(ApiModel):
    id: Optional[str] = None
    invoice_id: Optional[str] = None
    contract_id: Optional[str] = None
    room_id: Optional[str] = None
    user_id: Optional[str] = None
    billing_month: str = ""
    items: list[InvoiceItem] = Field(default_factory=list)
    status: str = "pending"
    note: Optional[str] = None
    total_amount: Optional[float] = None  # server value, display only
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def key(self) -> Optional[str]:
        return self.id or self.invoice_id


class InvoicePayload(WriteModel):
    contract_id: str
    room_id: str
    user_id: str
    billing_month: str
    status: InvoiceStatus = "pending"
    note: str = ""
    items: list[InvoiceItem]


# -------------------- Payments --------------------

class VnpayPaymentCreate(WriteModel):
    tenant_id: str
    contract_id: str
    amount: float  # VND, not multiplied by 100
    extra_note: Optional[str] = None
    invoice_id: Optional[str] = None


class VnpayPaymentOut(ApiModel):
    pay_url: str
    vnp_txn_ref: Optional[str] = None
    payment_id: Optional[str] = None


class Payment(ApiModel):
    payment_id: Optional[str] = None
    tenant_id: Optional[str] = None
    contract_id: Optional[str] = None
    invoice_id: Optional[str] = None
    amount: float = 0.0
    payment_status: Optional[str] = None  # pending | paid | failed
    payment_date: Optional[str] = None
    vnp_txn_ref: Optional[str] = None
    vnp_response_code: Optional[str] = None
    extra_note: Optional[str] = None
    paid_at: Optional[str] = None


# -------------------- Reviews / Reports --------------------

class Review(ApiModel):
    review_id: Optional[str] = None
    room_id: Optional[str] = None
    tenant_id: Optional[str] = None
    rating: Optional[float] = None
    comment: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None


class ReviewCreate(WriteModel):
    room_id: str
    rating: int = Field(ge=1, le=5)
    comment: str


class Report(ApiModel):
    report_id: Optional[str] = None
    room_id: Optional[str] = None
    reporter_id: Optional[str] = None
    reason: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None


class ReportCreate(WriteModel):
    room_id: str
    reason: str
    description: Optional[str] = None


# -------------------- Messages --------------------

MESSAGE_MAX_LENGTH = 1000


class Message(ApiModel):
    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    message_id: Optional[str] = None
    tenant_id: Optional[str] = None  # sender
    host_id: Optional[str] = None  # receiver
    message: str = ""
    time: Optional[str] = None
    is_read: bool = False
    read_at: Optional[str] = None

    @property
    def key(self) -> Optional[str]:
        return self.id or self.message_id


class MessageCreate(WriteModel):
    host_id: str
    message: str = Field(min_length=1, max_length=MESSAGE_MAX_LENGTH)

    @field_validator("host_id", "message")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


# -------------------- Statistics --------------------

class StatusCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    status: Optional[Any] = Field(default=None, alias="_id")
    count: int = 0


class RevenuePoint(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    month: Optional[str] = Field(default=None, alias="_id")  # YYYY-MM
    revenue: float = 0.0
    count: int = 0


class StatsKpis(ApiModel):
    users_by_role_status: list[StatusCount] = Field(default_factory=list)
    rooms_by_status: list[StatusCount] = Field(default_factory=list)
    contracts_by_status: list[StatusCount] = Field(default_factory=list)
    bookings_by_status: list[StatusCount] = Field(default_factory=list)
    invoices_by_status: list[StatusCount] = Field(default_factory=list)
    revenue_total: float = 0.0
    payments_paid_count: int = 0


class StatsCharts(ApiModel):
    revenue_monthly: list[RevenuePoint] = Field(default_factory=list)


class StatsRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow", protected_namespaces=())

    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None


class StatsOut(ApiModel):
    range: StatsRange = Field(default_factory=StatsRange)
    kpis: StatsKpis = Field(default_factory=StatsKpis)
    charts: StatsCharts = Field(default_factory=StatsCharts)
    breakdown: dict[str, list[StatusCount]] = Field(default_factory=dict)
