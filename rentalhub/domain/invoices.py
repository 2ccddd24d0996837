# rentalhub/domain/invoices.py
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional, Sequence

from ..errors import FormValidationError
from ..schemas import Invoice, InvoiceItem
from .dates import current_billing_month, is_billing_month


@dataclass(frozen=True)
class PaymentType:
    value: str
    label: str
    unit_label: str


PAYMENT_TYPES: tuple[PaymentType, ...] = (
    PaymentType("room", "Tiền thuê", "phòng"),
    PaymentType("electricity", "Tiền điện", "kWh"),
    PaymentType("water", "Tiền nước", "m³"),
    PaymentType("service", "Phí dịch vụ", "dịch vụ"),
    PaymentType("parking", "Phí gửi xe", "xe"),
    PaymentType("cleaning", "Phí vệ sinh", "lần"),
    PaymentType("internet", "Phí internet", "tháng"),
    PaymentType("other", "Khác", "đơn vị"),
)


@dataclass(frozen=True)
class InvoiceStatusOption:
    value: str
    label: str


STATUS_OPTIONS: tuple[InvoiceStatusOption, ...] = (
    InvoiceStatusOption("pending", "Chờ thanh toán"),
    InvoiceStatusOption("paid", "Đã thanh toán"),
    InvoiceStatusOption("unpaid", "Quá hạn"),
)

MISSING_REQUIRED_MSG = "Vui lòng điền đầy đủ thông tin bắt buộc và thêm ít nhất một khoản phí"
INVALID_ITEMS_MSG = "Vui lòng điền đầy đủ thông tin cho tất cả các khoản phí"
INVALID_MONTH_MSG = "Tháng thanh toán không hợp lệ (YYYY-MM)"


def payment_type_label(type_: str) -> str:
    for t in PAYMENT_TYPES:
        if t.value == type_:
            return t.label
    return type_


def payment_type_unit(type_: str) -> str:
    for t in PAYMENT_TYPES:
        if t.value == type_:
            return t.unit_label
    return "đơn vị"


def status_info(status: str) -> InvoiceStatusOption:
    """Unknown statuses fall back to the first option (pending)."""
    for s in STATUS_OPTIONS:
        if s.value == status:
            return s
    return STATUS_OPTIONS[0]


def calculate_total(items: Iterable[Any]) -> float:
    """Σ(unitPrice × quantity). Accepts InvoiceItem models or raw camelCase dicts."""
    total = 0.0
    for item in items:
        if isinstance(item, dict):
            item = InvoiceItem.model_validate(item)
        total += float(item.unit_price) * float(item.quantity)
    return float(total)


def _positive(v: float) -> bool:
    return v > 0 and math.isfinite(v)


def validate_invoice_form(*, billing_month: Optional[str], items: Sequence[InvoiceItem]) -> None:
    """
    Raise FormValidationError when the whole save must be blocked:
    - billing month missing or not YYYY-MM, or no items
    - any item without a type, or with unit price / quantity not a positive finite number
    """
    if not billing_month or not items:
        raise FormValidationError(MISSING_REQUIRED_MSG, field="billing_month" if not billing_month else "items")
    if not is_billing_month(billing_month):
        raise FormValidationError(INVALID_MONTH_MSG, field="billing_month")

    for item in items:
        if not item.type or not _positive(item.unit_price) or not _positive(item.quantity):
            raise FormValidationError(INVALID_ITEMS_MSG, field="items")


@dataclass(frozen=True)
class InvoiceDraft:
    """
    Create/edit form state. Every edit returns a new draft; items are a tuple
    so nothing can mutate a draft in place.
    """

    billing_month: str = field(default_factory=current_billing_month)
    status: str = "pending"
    note: str = ""
    items: tuple[InvoiceItem, ...] = ()

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceDraft":
        return cls(
            billing_month=invoice.billing_month,
            status=invoice.status,
            note=invoice.note or "",
            items=tuple(invoice.items),
        )

    @property
    def total(self) -> float:
        return calculate_total(self.items)

    def add_item(self, item: Optional[InvoiceItem] = None) -> "InvoiceDraft":
        new_item = item or InvoiceItem(type="room", unit_price=0.0, quantity=1, note="")
        return replace(self, items=self.items + (new_item,))

    def update_item(self, index: int, **changes: Any) -> "InvoiceDraft":
        if not 0 <= index < len(self.items):
            raise IndexError(f"no invoice item at index {index}")
        updated = tuple(
            InvoiceItem.model_validate({**item.model_dump(), **changes}) if i == index else item
            for i, item in enumerate(self.items)
        )
        return replace(self, items=updated)

    def remove_item(self, index: int) -> "InvoiceDraft":
        return replace(self, items=tuple(item for i, item in enumerate(self.items) if i != index))

    def with_fields(self, **changes: Any) -> "InvoiceDraft":
        return replace(self, **changes)

    def validate(self) -> None:
        validate_invoice_form(billing_month=self.billing_month, items=self.items)


def filter_invoices(
    invoices: Sequence[Invoice],
    *,
    search: str = "",
    status: str = "all",
    month: str = "all",
) -> list[Invoice]:
    """Search note / billing month / item label / item note; then exact status and month filters."""
    term = (search or "").lower()
    out: list[Invoice] = []
    for inv in invoices:
        matches_search = (
            term in (inv.note or "").lower()
            or term in inv.billing_month
            or any(term in payment_type_label(it.type).lower() or term in it.note.lower() for it in inv.items)
        )
        if not matches_search:
            continue
        if status != "all" and inv.status != status:
            continue
        if month != "all" and inv.billing_month != month:
            continue
        out.append(inv)
    return out


def available_months(invoices: Sequence[Invoice]) -> list[str]:
    return sorted({inv.billing_month for inv in invoices if inv.billing_month}, reverse=True)
