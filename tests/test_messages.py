# tests/test_messages.py
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from rentalhub.clients.cancellation import RequestScope
from rentalhub.domain.messages import filter_conversations, group_conversations, message_stats, partner_of
from rentalhub.errors import ApiError, FormValidationError
from rentalhub.schemas import Message, User
from rentalhub.services.message_service import MessageService
from rentalhub.workflows.messages import MessageInbox

ME = {"user_1"}

ROWS = [
    {"_id": "m1", "messageId": "msg001", "tenantId": "user_4", "hostId": "user_1", "message": "Phòng còn trống không?",
     "time": "2024-05-01T08:00:00.000Z", "isRead": True},
    {"_id": "m2", "messageId": "msg002", "tenantId": "user_1", "hostId": "user_4", "message": "Còn bạn nhé",
     "time": "2024-05-01T09:00:00.000Z", "isRead": False},
    {"_id": "m3", "messageId": "msg003", "tenantId": "user_4", "hostId": "user_1", "message": "Mai em qua xem",
     "time": "2024-05-02T10:00:00.000Z", "isRead": False},
    {"_id": "m4", "messageId": "msg004", "tenantId": "user_7", "hostId": "user_1", "message": "Cho hỏi giá điện",
     "time": "2024-05-01T12:00:00.000Z", "isRead": False},
]


def _messages() -> list[Message]:
    return [Message.model_validate(r) for r in ROWS]


def test_partner_is_the_other_side():
    sent, received = _messages()[1], _messages()[0]
    assert partner_of(sent, ME) == "user_4"
    assert partner_of(received, ME) == "user_4"
    assert partner_of(Message(tenant_id="a", host_id="b"), ME) == "a"


def test_group_conversations_orders_and_counts_unread():
    users = [User(user_id="user_4", id="f4", full_name="Lê Hoa"), User(user_id="user_7", full_name="Phạm Minh")]

    convs = group_conversations(_messages(), ME, users)

    assert [c.partner_id for c in convs] == ["user_4", "user_7"]
    first = convs[0]
    assert [m.key for m in first.messages] == ["m1", "m2", "m3"]
    assert first.last_message == "Mai em qua xem"
    # own unread reply is not counted
    assert first.unread_count == 1
    assert first.partner.full_name == "Lê Hoa"
    assert convs[1].unread_count == 1


def test_partner_known_by_id_and_user_id_is_one_conversation():
    users = [User(user_id="user_4", id="f4")]
    rows = _messages()[:1] + [Message(id="m9", tenant_id="f4", host_id="user_1", message="alo", time="2024-05-03")]

    convs = group_conversations(rows, ME, users)

    assert len(convs) == 1
    assert convs[0].last_message == "alo"


def test_message_stats():
    now = datetime(2024, 5, 2, 18, 0, tzinfo=timezone.utc)
    stats = message_stats(_messages(), ME, now=now)
    assert (stats.total, stats.unread, stats.today, stats.this_week) == (4, 2, 1, 4)


def test_filter_conversations():
    convs = group_conversations(_messages(), ME, [User(user_id="user_7", full_name="Phạm Minh")])
    assert [c.partner_id for c in filter_conversations(convs, search="minh")] == ["user_7"]
    assert [c.partner_id for c in filter_conversations(convs, search="XEM")] == ["user_4"]
    assert filter_conversations(convs, read="read") == []
    assert len(filter_conversations(convs, read="unread")) == 2


def test_send_posts_receiver_and_text(make_api):
    api, spy, _ = make_api({("POST", "/messages"): (201, {"success": True, "data": {**ROWS[1], "_id": "m5"}})})

    out = MessageService(api).send("user_4", "Còn bạn nhé")

    assert out.key == "m5"
    assert spy.body(0) == {"hostId": "user_4", "message": "Còn bạn nhé"}


@pytest.mark.parametrize("text", ["", "   ", "x" * 1001])
def test_invalid_message_sends_nothing(make_api, text):
    api, spy, _ = make_api()
    with pytest.raises(FormValidationError) as ei:
        MessageService(api).send("user_4", text)
    assert ei.value.field == "message"
    assert spy.calls == []


def test_list_accepts_bare_array_and_conversation_endpoint(make_api):
    api, spy, _ = make_api(
        {
            ("GET", "/messages"): (200, ROWS),
            ("GET", "/messages/conversation/user_4/user_1"): (200, {"success": True, "count": 1, "data": ROWS[:1]}),
        }
    )
    svc = MessageService(api)

    assert len(svc.list()) == 4
    assert [m.key for m in svc.conversation("user_4", "user_1")] == ["m1"]


def test_mark_conversation_read_patches_only_incoming_unread(make_api):
    api, spy, state = make_api(
        {
            ("GET", "/messages"): (200, {"success": True, "data": ROWS}),
            ("PATCH", "/messages/m3"): (200, {"success": True}),
        }
    )
    inbox = MessageInbox(api, state)
    inbox.load()

    assert inbox.mark_conversation_read("user_4") == 1
    patches = [(i, p) for i, p in enumerate(spy.paths) if p[0] == "PATCH"]
    assert [p for _, p in patches] == [("PATCH", "/messages/m3")]
    assert spy.body(patches[0][0]) == {"isRead": True}
    assert spy.paths[-1] == ("GET", "/messages")


def test_delete_conversation_deletes_both_directions(make_api):
    routes = {("GET", "/messages"): (200, {"data": ROWS})}
    routes.update({("DELETE", f"/messages/{k}"): (200, {"success": True}) for k in ("m1", "m2", "m3")})
    api, spy, state = make_api(routes)
    inbox = MessageInbox(api, state)
    inbox.load()

    assert inbox.delete_conversation("user_4") == 3
    assert [p for p in spy.paths if p[0] == "DELETE"] == [
        ("DELETE", "/messages/m1"),
        ("DELETE", "/messages/m2"),
        ("DELETE", "/messages/m3"),
    ]


def test_unknown_conversation(make_api):
    api, spy, state = make_api({("GET", "/messages"): (200, {"data": ROWS})})
    inbox = MessageInbox(api, state)
    inbox.load()
    with pytest.raises(FormValidationError):
        inbox.delete_conversation("nobody")
    assert spy.paths == [("GET", "/messages")]


def test_admin_inbox_loads_users_too(make_api):
    api, spy, state = make_api(
        {
            ("GET", "/messages"): (200, {"data": ROWS}),
            ("GET", "/users"): (200, {"data": {"users": [{"userId": "user_4", "fullName": "Lê Hoa"}]}}),
        },
        user={"userId": "user_1", "role": "admin"},
    )

    with RequestScope(api) as scope:
        convs = MessageInbox(scope, state).load()

    assert sorted(spy.paths) == [("GET", "/messages"), ("GET", "/users")]
    assert convs[0].partner.full_name == "Lê Hoa"


def test_server_failure_surfaces(make_api):
    api, _, state = make_api({("GET", "/messages"): (500, {"message": "Lỗi server"})})
    with pytest.raises(ApiError) as ei:
        MessageInbox(api, state).load()
    assert ei.value.message == "Lỗi server"
