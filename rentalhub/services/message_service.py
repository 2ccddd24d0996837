# rentalhub/services/message_service.py
from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from ..clients.http import pick
from ..errors import FormValidationError
from ..schemas import MESSAGE_MAX_LENGTH, Message, MessageCreate
from .base import BaseService, as_model, as_models

INVALID_MESSAGE_MSG = f"Tin nhắn không được để trống và tối đa {MESSAGE_MAX_LENGTH} ký tự"


class MessageService(BaseService):
    """
    /messages. The server stamps the sender (tenantId) from the token, so a
    send only carries the receiver (hostId) and the text.
    """

    def list(self) -> list[Message]:
        body = self.api.get("/messages")
        return as_models(Message, pick(body, "data.messages", "data", "", default=[]))

    def conversation(self, tenant_id: str, host_id: str) -> list[Message]:
        body = self.api.get(f"/messages/conversation/{tenant_id}/{host_id}")
        return as_models(Message, pick(body, "data", default=[]))

    def send(self, host_id: str, text: str) -> Optional[Message]:
        try:
            payload = MessageCreate(host_id=host_id, message=text)
        except ValidationError as e:
            raise FormValidationError(INVALID_MESSAGE_MSG, field="message") from e
        self.require_token()
        body = self.api.post("/messages", json=payload.to_api(), fallback="Gửi tin nhắn thất bại")
        return as_model(Message, body, "data")

    def mark_read(self, message_id: str) -> None:
        self.api.patch(f"/messages/{message_id}", json={"isRead": True}, fallback="Cập nhật tin nhắn thất bại")

    def delete(self, message_id: str) -> None:
        self.api.delete(f"/messages/{message_id}", fallback="Xóa tin nhắn thất bại")
