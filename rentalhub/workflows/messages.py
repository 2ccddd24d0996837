# rentalhub/workflows/messages.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..clients.cancellation import RequestScope
from ..domain.messages import (
    Conversation,
    MessageStats,
    filter_conversations,
    group_conversations,
    is_unread_incoming,
    message_stats,
)
from ..errors import FormValidationError, NotSignedIn
from ..schemas import Message, User
from ..services.base import Api
from ..services.message_service import MessageService
from ..services.user_service import UserService
from ..state import AppState

log = logging.getLogger(__name__)

CONVERSATION_NOT_FOUND_MSG = "Không tìm thấy cuộc trò chuyện"


class MessageInbox:
    """
    Signed-in user's inbox. Messages are grouped by the other participant.
    Admins also load the user directory so partners get names; for other
    roles the partner stays None.
    """

    def __init__(self, api: Api, state: AppState) -> None:
        self.api = api
        self.state = state
        self.messages_api = MessageService(api)
        self.users = UserService(api)
        self.messages: list[Message] = []
        self.conversations: list[Conversation] = []

    def own_ids(self) -> set[str]:
        u = self.state.user or {}
        ids = {str(v) for v in (u.get("id"), u.get("userId")) if v}
        if not ids:
            raise NotSignedIn()
        return ids

    def load(self) -> list[Conversation]:
        own = self.own_ids()
        users: list[User] = []
        if self.state.role == "admin":
            if isinstance(self.api, RequestScope):
                self.messages, users = self.api.gather(self.messages_api.list, self.users.list_users)
            else:
                self.messages = self.messages_api.list()
                users = self.users.list_users()
        else:
            self.messages = self.messages_api.list()
        self.conversations = group_conversations(self.messages, own, users)
        return self.conversations

    def filtered(self, *, search: str = "", read: str = "all") -> list[Conversation]:
        return filter_conversations(self.conversations, search=search, read=read)

    def stats(self, *, now: Optional[datetime] = None) -> MessageStats:
        return message_stats(self.messages, self.own_ids(), now=now)

    def _find(self, partner_id: str) -> Conversation:
        for c in self.conversations:
            if c.partner_id == partner_id:
                return c
        raise FormValidationError(CONVERSATION_NOT_FOUND_MSG, field="partner_id")

    def _refresh(self) -> list[Conversation]:
        if isinstance(self.api, RequestScope):
            self.api.invalidate()
        return self.load()

    def reply(self, partner_id: str, text: str) -> Optional[Message]:
        sent = self.messages_api.send(partner_id, text)
        log.info("message sent", extra={"user_id": partner_id})
        self._refresh()
        return sent

    def mark_conversation_read(self, partner_id: str) -> int:
        """PATCH every unread message the partner sent; returns how many were marked."""
        conv = self._find(partner_id)
        own = self.own_ids()
        ids = [m.key for m in conv.messages if m.key and is_unread_incoming(m, own)]
        for mid in ids:
            self.messages_api.mark_read(mid)
        if ids:
            self._refresh()
        return len(ids)

    def delete_conversation(self, partner_id: str) -> int:
        """DELETE each message of the conversation, both directions."""
        conv = self._find(partner_id)
        ids = [m.key for m in conv.messages if m.key]
        for mid in ids:
            self.messages_api.delete(mid)
        log.info("conversation deleted (%d messages)", len(ids), extra={"user_id": partner_id})
        self._refresh()
        return len(ids)
