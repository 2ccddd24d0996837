# rentalhub/workflows/contracts.py
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..domain.contracts import ContractForm, ContractRow, build_contract_payload, map_contracts
from ..errors import ApiError, NetworkError, user_message
from ..schemas import Contract
from ..services.base import Api
from ..services.contract_service import ContractService

log = logging.getLogger(__name__)

CANCEL_OK_MSG = "Đã gửi yêu cầu hủy hợp đồng"
CANCEL_FAILED_MSG = "Lỗi hủy hợp đồng"
TERMINATE_OK_MSG = "Đã chấm dứt hợp đồng"
TERMINATE_FAILED_MSG = "Lỗi chấm dứt hợp đồng"


@dataclass(frozen=True)
class ContractActionOutcome:
    ok: bool
    message: str
    contracts: list[Contract]


class ContractWorkflow:
    def __init__(
        self,
        api: Api,
        *,
        now: Optional[datetime] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.contracts = ContractService(api)
        self._now = now
        self._rng = rng

    def create_from_form(self, form: ContractForm) -> Optional[Contract]:
        """Validation failures raise before anything is sent; no retry on API errors."""
        payload = build_contract_payload(form, now=self._now, rng=self._rng)
        contract = self.contracts.create(payload)
        log.info(
            "contract created (duration=%s, end=%s)",
            payload.duration,
            payload.end_date,
            extra={"room_id": payload.room_id, "booking_id": payload.booking_id},
        )
        return contract

    def host_rows(self) -> list[ContractRow]:
        return map_contracts(self.contracts.list_host())

    def tenant_contracts(self) -> list[Contract]:
        return self.contracts.list_tenant()

    def cancel(self, contract_id: str) -> ContractActionOutcome:
        """
        Tenant cancellation: one PUT, then the tenant list is always
        re-fetched. No optimistic update, no idempotency key.
        """
        ok, message = True, CANCEL_OK_MSG
        try:
            self.contracts.cancel(contract_id)
        except (ApiError, NetworkError) as e:
            log.warning("contract cancel failed: %s", e, extra={"contract_id": contract_id})
            ok, message = False, user_message(e, CANCEL_FAILED_MSG)
        return ContractActionOutcome(ok=ok, message=message, contracts=self.contracts.list_tenant())

    def terminate(self, contract_id: str) -> ContractActionOutcome:
        """Host termination; same shape as cancel, host list re-fetched."""
        ok, message = True, TERMINATE_OK_MSG
        try:
            self.contracts.terminate(contract_id)
        except (ApiError, NetworkError) as e:
            log.warning("contract terminate failed: %s", e, extra={"contract_id": contract_id})
            ok, message = False, user_message(e, TERMINATE_FAILED_MSG)
        return ContractActionOutcome(ok=ok, message=message, contracts=self.contracts.list_host())
