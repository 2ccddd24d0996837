# rentalhub/workflows/checkout.py
from __future__ import annotations

import logging
import math
import webbrowser
from typing import Any, Callable, Optional

from ..domain.invoices import calculate_total
from ..errors import FormValidationError, NotSignedIn
from ..schemas import Invoice, Payment, VnpayPaymentCreate, VnpayPaymentOut
from ..services.base import Api
from ..services.payment_service import PaymentService
from ..state import AppState

log = logging.getLogger(__name__)

MISSING_INFO_MSG = "Thiếu thông tin thanh toán. Vui lòng quay lại trang hợp đồng."

Redirect = Callable[[str], Any]


def open_in_browser(url: str) -> None:
    webbrowser.open(url)


class CheckoutFlow:
    """
    Tenant payment: ask the backend for a VNPay pay URL and hand it to
    `redirect`. The result of the payment is not checked here.
    """

    def __init__(self, api: Api, state: AppState, *, redirect: Optional[Redirect] = None) -> None:
        self.payments = PaymentService(api)
        self.state = state
        self.redirect = redirect if redirect is not None else open_in_browser

    def _tenant_id(self) -> str:
        tenant_id = self.state.user_id
        if not tenant_id:
            raise NotSignedIn()
        return tenant_id

    @staticmethod
    def _check(contract_id: Optional[str], amount: Optional[float]) -> float:
        if not contract_id or amount is None:
            raise FormValidationError(MISSING_INFO_MSG, field="contract_id" if not contract_id else "amount")
        amount = float(amount)
        if not math.isfinite(amount) or amount <= 0:
            raise FormValidationError(MISSING_INFO_MSG, field="amount")
        return amount

    def pay_contract(self, contract_id: Optional[str], amount: Optional[float], note: str = "") -> VnpayPaymentOut:
        value = self._check(contract_id, amount)
        payload = VnpayPaymentCreate(
            tenant_id=self._tenant_id(),
            contract_id=str(contract_id),
            amount=value,
            extra_note=note,
        )
        out = self.payments.create_vnpay(payload)
        log.info("redirecting to VNPay (ref=%s)", out.vnp_txn_ref, extra={"contract_id": contract_id})
        self.redirect(out.pay_url)
        return out

    def pay_invoice(self, invoice: Invoice, note: str = "") -> VnpayPaymentOut:
        """The amount is the invoice's recomputed item total, never the stored one."""
        value = self._check(invoice.contract_id, calculate_total(invoice.items))
        if not invoice.key:
            raise FormValidationError(MISSING_INFO_MSG, field="invoice_id")
        payload = VnpayPaymentCreate(
            tenant_id=self._tenant_id(),
            contract_id=str(invoice.contract_id),
            amount=value,
            extra_note=note or f"Thanh toán hóa đơn {invoice.billing_month}",
            invoice_id=invoice.key,
        )
        out = self.payments.create_vnpay_invoice(payload)
        log.info(
            "redirecting to VNPay (ref=%s)",
            out.vnp_txn_ref,
            extra={"contract_id": invoice.contract_id, "invoice_id": invoice.key},
        )
        self.redirect(out.pay_url)
        return out

    def history(self) -> list[Payment]:
        return self.payments.list()
