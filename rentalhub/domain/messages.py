# rentalhub/domain/messages.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Collection, Iterable, Optional

from ..schemas import Message, User
from .dates import parse_datetime

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Conversation:
    partner_id: str
    partner: Optional[User]
    last_message: str
    last_message_time: Optional[str]
    unread_count: int
    messages: tuple[Message, ...]


@dataclass(frozen=True)
class MessageStats:
    total: int
    unread: int
    today: int
    this_week: int


def _sort_key(m: Message) -> datetime:
    return parse_datetime(m.time) or _EPOCH


def partner_of(message: Message, own_ids: Collection[str]) -> Optional[str]:
    """The other side of a message, seen from the signed-in user."""
    if message.tenant_id and message.tenant_id in own_ids:
        return message.host_id or None
    if message.host_id and message.host_id in own_ids:
        return message.tenant_id or None
    return message.tenant_id or message.host_id or None


def is_unread_incoming(message: Message, own_ids: Collection[str]) -> bool:
    return not message.is_read and message.tenant_id not in own_ids


def _index_users(users: Iterable[User]) -> dict[str, User]:
    by_id: dict[str, User] = {}
    for u in users:
        for k in (u.user_id, u.id):
            if k:
                by_id.setdefault(k, u)
    return by_id


def group_conversations(
    messages: Iterable[Message],
    own_ids: Collection[str],
    users: Iterable[User] = (),
) -> list[Conversation]:
    """
    One conversation per partner. Messages inside a conversation run oldest
    first; conversations are ordered by their latest message, newest first.
    A partner that is not in `users` still gets a conversation (partner=None).
    """
    by_user = _index_users(users)
    groups: dict[str, list[Message]] = {}
    for m in messages:
        pid = partner_of(m, own_ids)
        if not pid:
            continue
        user = by_user.get(pid)
        # the same person may show up under userId or id
        key = (user.key if user else None) or pid
        groups.setdefault(key, []).append(m)

    out: list[Conversation] = []
    for pid, msgs in groups.items():
        msgs.sort(key=_sort_key)
        last = msgs[-1]
        out.append(
            Conversation(
                partner_id=pid,
                partner=by_user.get(pid),
                last_message=last.message,
                last_message_time=last.time,
                unread_count=sum(1 for m in msgs if is_unread_incoming(m, own_ids)),
                messages=tuple(msgs),
            )
        )
    out.sort(key=lambda c: _sort_key(c.messages[-1]), reverse=True)
    return out


def message_stats(messages: Iterable[Message], own_ids: Collection[str], *, now: Optional[datetime] = None) -> MessageStats:
    """`today` counts from UTC midnight; `this_week` is the trailing seven days."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_ago = now - timedelta(days=7)

    rows = list(messages)
    times = [parse_datetime(m.time) for m in rows]
    return MessageStats(
        total=len(rows),
        unread=sum(1 for m in rows if is_unread_incoming(m, own_ids)),
        today=sum(1 for t in times if t is not None and t >= midnight),
        this_week=sum(1 for t in times if t is not None and t >= week_ago),
    )


def filter_conversations(
    conversations: Iterable[Conversation],
    *,
    search: str = "",
    read: str = "all",
) -> list[Conversation]:
    """
    `search` is a case-insensitive match on partner name, email or the last
    message text. `read` is all | read | unread, judged by unread_count.
    """
    term = (search or "").strip().lower()
    rows = list(conversations)
    if read == "unread":
        rows = [c for c in rows if c.unread_count > 0]
    elif read == "read":
        rows = [c for c in rows if c.unread_count == 0]
    if not term:
        return rows

    def hit(c: Conversation) -> bool:
        p = c.partner
        hay = [c.last_message, c.partner_id, p.full_name if p else None, p.email if p else None]
        return any(term in (h or "").lower() for h in hay)

    return [c for c in rows if hit(c)]
