# rentalhub/services/invoice_service.py
from __future__ import annotations

from typing import Optional

from ..clients.http import pick
from ..schemas import Invoice, InvoicePayload
from .base import BaseService, as_model, as_models, ensure_success

SAVE_FAILED_MSG = "Có lỗi xảy ra khi lưu hóa đơn"
DELETE_FAILED_MSG = "Có lỗi xảy ra khi xóa hóa đơn"


class InvoiceService(BaseService):
    def list(self) -> list[Invoice]:
        body = ensure_success(self.api.get("/invoices", params=self.list_params()), "Có lỗi xảy ra")
        return as_models(Invoice, pick(body, "data.invoices", "data", default=[]))

    def by_contract(self, contract_id: str) -> list[Invoice]:
        body = ensure_success(self.api.get(f"/invoices/contract/{contract_id}"), "Có lỗi xảy ra")
        return as_models(Invoice, pick(body, "data", default=[]))

    def by_user(self, user_id: str) -> list[Invoice]:
        body = ensure_success(self.api.get(f"/invoices/user/{user_id}"), "Có lỗi xảy ra")
        return as_models(Invoice, pick(body, "data", default=[]))

    def create(self, payload: InvoicePayload) -> Optional[Invoice]:
        body = self.api.post("/invoices", json=payload.to_api(), fallback=SAVE_FAILED_MSG)
        return as_model(Invoice, ensure_success(body, SAVE_FAILED_MSG), "data")

    def update(self, invoice_id: str, payload: InvoicePayload) -> Optional[Invoice]:
        body = self.api.put(f"/invoices/{invoice_id}", json=payload.to_api(), fallback=SAVE_FAILED_MSG)
        return as_model(Invoice, ensure_success(body, SAVE_FAILED_MSG), "data")

    def delete(self, invoice_id: str) -> None:
        body = self.api.delete(f"/invoices/{invoice_id}", fallback=DELETE_FAILED_MSG)
        ensure_success(body, DELETE_FAILED_MSG)
