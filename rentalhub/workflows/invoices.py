# rentalhub/workflows/invoices.py
from __future__ import annotations

import logging
from typing import Optional

from ..domain.invoices import STATUS_OPTIONS, InvoiceDraft, available_months, filter_invoices
from ..errors import FormValidationError
from ..schemas import Invoice, InvoicePayload
from ..services.base import Api
from ..services.invoice_service import InvoiceService

log = logging.getLogger(__name__)

_STATUS_VALUES = {s.value for s in STATUS_OPTIONS}


class InvoiceManager:
    """
    Per-contract invoice CRUD.

    `invoices` always holds the last list fetched from the server; every
    mutation is followed by a re-fetch rather than a local patch.
    """

    def __init__(self, api: Api, *, contract_id: str, room_id: str, user_id: str) -> None:
        self.service = InvoiceService(api)
        self.contract_id = contract_id
        self.room_id = room_id
        self.user_id = user_id
        self.invoices: list[Invoice] = []

    def refresh(self) -> list[Invoice]:
        self.invoices = self.service.by_contract(self.contract_id)
        return self.invoices

    def new_draft(self) -> InvoiceDraft:
        return InvoiceDraft()

    def start_edit(self, invoice: Invoice) -> InvoiceDraft:
        return InvoiceDraft.from_invoice(invoice)

    def _payload(self, draft: InvoiceDraft) -> InvoicePayload:
        if draft.status not in _STATUS_VALUES:
            raise FormValidationError(f"Trạng thái hóa đơn không hợp lệ: {draft.status}", field="status")
        return InvoicePayload(
            contract_id=self.contract_id,
            room_id=self.room_id,
            user_id=self.user_id,
            billing_month=draft.billing_month,
            status=draft.status,
            note=draft.note,
            items=list(draft.items),
        )

    def save(self, draft: InvoiceDraft, *, invoice_id: Optional[str] = None) -> Optional[Invoice]:
        """
        POST a new invoice, or PUT when `invoice_id` is given. An invalid draft
        raises FormValidationError and nothing is sent.
        """
        draft.validate()
        payload = self._payload(draft)

        if invoice_id:
            saved = self.service.update(invoice_id, payload)
        else:
            saved = self.service.create(payload)

        log.info(
            "invoice saved (month=%s, total=%s)",
            draft.billing_month,
            draft.total,
            extra={"contract_id": self.contract_id, "invoice_id": invoice_id or (saved.key if saved else None)},
        )
        self.refresh()
        return saved

    def delete(self, invoice_id: str) -> list[Invoice]:
        self.service.delete(invoice_id)
        log.info("invoice deleted", extra={"contract_id": self.contract_id, "invoice_id": invoice_id})
        return self.refresh()

    def filtered(self, *, search: str = "", status: str = "all", month: str = "all") -> list[Invoice]:
        return filter_invoices(self.invoices, search=search, status=status, month=month)

    def months(self) -> list[str]:
        return available_months(self.invoices)
