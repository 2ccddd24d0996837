# rentalhub/services/payment_service.py
from __future__ import annotations

from typing import Any

from ..clients.http import pick
from ..errors import ApiError
from ..schemas import Payment, VnpayPaymentCreate, VnpayPaymentOut
from .base import BaseService, as_models

CREATE_FAILED_MSG = "Không thể tạo giao dịch."


class PaymentService(BaseService):
    """
    VNPay checkout goes through the backend: the client only asks for a pay
    URL and never sees card or gateway details.
    """

    def _create(self, path: str, payload: VnpayPaymentCreate) -> VnpayPaymentOut:
        self.require_token()
        body = self.api.post(path, json=payload.to_api(), fallback=CREATE_FAILED_MSG)
        data = pick(body, "data", "")
        if not isinstance(data, dict) or not data.get("payUrl"):
            raise ApiError(CREATE_FAILED_MSG, payload=body)
        return VnpayPaymentOut.model_validate(data)

    def create_vnpay(self, payload: VnpayPaymentCreate) -> VnpayPaymentOut:
        return self._create("/payments/vnpay/create", payload)

    def create_vnpay_invoice(self, payload: VnpayPaymentCreate) -> VnpayPaymentOut:
        return self._create("/payments/vnpay/createInvoice", payload)

    def list(self) -> list[Payment]:
        body = self.api.get("/payments", params=self.list_params())
        return as_models(Payment, pick(body, "data.payments", "data", default=[]))

    def result_by_ref(self, vnp_txn_ref: str) -> dict[str, Any]:
        body = self.api.get("/payments/payment-result", params={"ref": vnp_txn_ref})
        data = pick(body, "data", "")
        return data if isinstance(data, dict) else {}
