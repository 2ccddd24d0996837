# rentalhub/services/contract_service.py
from __future__ import annotations

from typing import Any, Optional

from ..clients.http import pick
from ..schemas import Contract, ContractCreate
from .base import BaseService, as_model, as_models

CREATE_FAILED_MSG = "❌ Tạo hợp đồng thất bại!"

# BE responses seen so far: {data: {data: {contracts}}}, {data: {contracts}}, {data: [...]}
_LIST_PATHS = ("data.data.contracts", "data.contracts", "contracts", "data")


class ContractService(BaseService):
    def create(self, payload: ContractCreate) -> Optional[Contract]:
        body = self.api.post("/contracts", json=payload.to_api(), fallback=CREATE_FAILED_MSG)
        return as_model(Contract, body, "data")

    def list_host(self) -> list[Contract]:
        body = self.api.get("/contracts/host", params=self.list_params())
        return as_models(Contract, pick(body, *_LIST_PATHS, default=[]))

    def list_tenant(self) -> list[Contract]:
        body = self.api.get("/contracts/tenant", params=self.list_params())
        return as_models(Contract, pick(body, *_LIST_PATHS, default=[]))

    def list(self, *, room_id: Optional[str] = None, tenant_id: Optional[str] = None) -> list[Contract]:
        body = self.api.get("/contracts", params=self.list_params(roomId=room_id, tenantId=tenant_id))
        return as_models(Contract, pick(body, *_LIST_PATHS, default=[]))

    def get(self, contract_id: str) -> Optional[Contract]:
        body = self.api.get(f"/contracts/{contract_id}")
        return as_model(Contract, body, "data.contract", "data")

    def delete(self, contract_id: str) -> None:
        self.api.delete(f"/contracts/{contract_id}", fallback="Xóa hợp đồng thất bại")

    def cancel(self, contract_id: str) -> Optional[Contract]:
        """Tenant-initiated cancellation request."""
        body = self.api.put(f"/contracts/{contract_id}/cancel", fallback="Lỗi hủy hợp đồng")
        return as_model(Contract, body, "data")

    def terminate(self, contract_id: str) -> Optional[Contract]:
        """Host-side termination."""
        body = self.api.put(f"/contracts/{contract_id}/terminated", fallback="Lỗi chấm dứt hợp đồng")
        return as_model(Contract, body, "data")

    def active_for_self(self, room_id: str) -> dict[str, Any]:
        """Whether the signed-in user already holds an active contract on this room."""
        body = self.api.get(f"/contracts/rooms/{room_id}/active/self")
        return body if isinstance(body, dict) else {}
