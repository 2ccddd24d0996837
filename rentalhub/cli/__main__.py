# rentalhub/cli/__main__.py
from __future__ import annotations

import argparse
import dataclasses
import sys
from typing import Any, Optional, Sequence

from rentalhub.clients.cancellation import RequestScope
from rentalhub.clients.http import DEFAULT_FALLBACK, ApiClient
from rentalhub.config import settings
from rentalhub.domain.contracts import ContractForm
from rentalhub.domain.invoices import InvoiceDraft
from rentalhub.domain.labels import convert_status, format_currency
from rentalhub.errors import FormValidationError, RentalHubError, user_message
from rentalhub.logging_config import configure_logging
from rentalhub.middleware.request_id import request_id_scope
from rentalhub.schemas import InvoiceItem
from rentalhub.services.auth_service import AuthService
from rentalhub.state import AppState, StateStore
from rentalhub.web.result_page import serve
from rentalhub.workflows.checkout import CheckoutFlow, open_in_browser
from rentalhub.workflows.contracts import ContractWorkflow
from rentalhub.workflows.dashboard import DashboardWorkflow
from rentalhub.workflows.invoices import InvoiceManager
from rentalhub.workflows.messages import MessageInbox
from rentalhub.workflows.rental_requests import RentalRequestWorkflow


def parse_item(raw: str) -> InvoiceItem:
    """type:unitPrice[:quantity[:note]], e.g. electricity:3500:120:tháng 5"""
    parts = raw.split(":", 3)
    if len(parts) < 2:
        raise FormValidationError(f"Khoản phí không hợp lệ: {raw}", field="items")
    data: dict[str, Any] = {"type": parts[0].strip(), "unitPrice": parts[1].strip()}
    if len(parts) > 2:
        data["quantity"] = parts[2].strip()
    if len(parts) > 3:
        data["note"] = parts[3]
    try:
        return InvoiceItem.model_validate(data)
    except ValueError as e:
        raise FormValidationError(f"Khoản phí không hợp lệ: {raw}", field="items") from e


def _dump(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {k: _dump(v) for k, v in dataclasses.asdict(obj).items()}
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_none=True)
    if isinstance(obj, (list, tuple)):
        return [_dump(x) for x in obj]
    if isinstance(obj, dict):
        return {k: _dump(v) for k, v in obj.items()}
    return obj


def _booking_row(b) -> dict[str, Any]:
    return {
        "booking_id": b.key,
        "room_id": b.room_id,
        "room_title": b.room_info.room_title if b.room_info else None,
        "tenant": b.tenant_info.full_name if b.tenant_info else b.tenant_id,
        "start_date": b.start_date,
        "end_date": b.end_date,
        "status": convert_status(b.status or ""),
    }


def _invoice_row(inv) -> dict[str, Any]:
    draft = InvoiceDraft.from_invoice(inv)
    return {
        "invoice_id": inv.key,
        "billing_month": inv.billing_month,
        "status": convert_status(inv.status),
        "total": format_currency(draft.total),
        "items": len(inv.items),
    }


# -------------------- commands --------------------

def cmd_login(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    res = AuthService(api, state).login(email=args.email, password=args.password)
    return {"ok": True, "user_id": res.user.key, "role": res.user.role, "full_name": res.user.full_name}


def cmd_logout(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    AuthService(api, state).logout()
    return {"ok": True}


def cmd_whoami(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    return {"ok": True, "signed_in": state.is_authenticated(), "user": state.user}


def cmd_bookings(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    with RequestScope(api) as scope:
        rows = RentalRequestWorkflow(scope).list_requests(args.status)
    return {"ok": True, "count": len(rows), "bookings": [_booking_row(b) for b in rows]}


def cmd_approve(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    with RequestScope(api) as scope:
        out = RentalRequestWorkflow(scope).approve_and_create_contract(args.booking_id)
    return {
        "ok": True,
        "booking_id": out.booking.key,
        "contract": _dump(out.contract),
        "pending": sum(1 for b in out.requests if b.status == "pending"),
    }


def cmd_reject(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    rows = RentalRequestWorkflow(api).reject(args.booking_id, args.reason)
    return {"ok": True, "booking_id": args.booking_id, "remaining": len(rows)}


def cmd_contracts(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    wf = ContractWorkflow(api)
    if args.role == "host":
        return {"ok": True, "contracts": _dump(wf.host_rows())}
    return {"ok": True, "contracts": _dump(wf.tenant_contracts())}


def cmd_create_contract(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    form = ContractForm(
        room_id=args.room_id,
        tenant_id=args.tenant_id,
        duration=args.duration,
        rent_price=args.rent_price,
        start_date=args.start_date,
        terms=args.terms,
    )
    contract = ContractWorkflow(api).create_from_form(form)
    return {"ok": True, "contract": _dump(contract)}


def cmd_cancel_contract(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    out = ContractWorkflow(api).cancel(args.contract_id)
    return {"ok": out.ok, "message": out.message, "contracts": len(out.contracts)}


def cmd_terminate_contract(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    out = ContractWorkflow(api).terminate(args.contract_id)
    return {"ok": out.ok, "message": out.message, "contracts": len(out.contracts)}


def _invoice_manager(api: ApiClient, state: AppState, args: argparse.Namespace) -> InvoiceManager:
    return InvoiceManager(
        api,
        contract_id=args.contract_id,
        room_id=getattr(args, "room_id", None) or "",
        user_id=getattr(args, "user_id", None) or state.user_id or "",
    )


def cmd_invoices(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    mgr = _invoice_manager(api, state, args)
    mgr.refresh()
    rows = mgr.filtered(search=args.search, status=args.status, month=args.month)
    return {"ok": True, "months": mgr.months(), "invoices": [_invoice_row(i) for i in rows]}


def cmd_add_invoice(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    mgr = _invoice_manager(api, state, args)
    draft = InvoiceDraft(billing_month=args.month, status=args.status, note=args.note)
    for raw in args.item:
        draft = draft.add_item(parse_item(raw))
    saved = mgr.save(draft, invoice_id=args.invoice_id)
    return {
        "ok": True,
        "invoice_id": saved.key if saved else args.invoice_id,
        "total": format_currency(draft.total),
        "invoices": len(mgr.invoices),
    }


def cmd_delete_invoice(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    rows = _invoice_manager(api, state, args).delete(args.invoice_id)
    return {"ok": True, "invoices": len(rows)}


def _redirect(args: argparse.Namespace):
    if settings.open_browser and not args.no_browser:
        return open_in_browser
    return lambda url: None


def cmd_pay_contract(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    out = CheckoutFlow(api, state, redirect=_redirect(args)).pay_contract(args.contract_id, args.amount, args.note)
    return {"ok": True, "pay_url": out.pay_url, "vnp_txn_ref": out.vnp_txn_ref}


def cmd_pay_invoice(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    mgr = _invoice_manager(api, state, args)
    invoice = next((i for i in mgr.refresh() if i.key == args.invoice_id), None)
    if invoice is None:
        raise FormValidationError("Không tìm thấy hóa đơn", field="invoice_id")
    out = CheckoutFlow(api, state, redirect=_redirect(args)).pay_invoice(invoice, args.note)
    return {"ok": True, "pay_url": out.pay_url, "vnp_txn_ref": out.vnp_txn_ref}


def cmd_payments(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    rows = CheckoutFlow(api, state).history()
    return {"ok": True, "payments": _dump(rows)}


def cmd_stats(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    with RequestScope(api) as scope:
        wf = DashboardWorkflow(scope)
        if args.admin:
            out: Any = wf.admin_overview(date_from=args.date_from, date_to=args.date_to)
        else:
            out = wf.host(date_from=args.date_from, date_to=args.date_to)
    return {"ok": True, "stats": _dump(out)}


def cmd_messages(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    with RequestScope(api) as scope:
        inbox = MessageInbox(scope, state)
        inbox.load()
        if args.mark_read:
            inbox.mark_conversation_read(args.mark_read)
        rows = inbox.filtered(search=args.search, read=args.read)
        stats = inbox.stats()
    return {
        "ok": True,
        "stats": _dump(stats),
        "conversations": [
            {
                "partner_id": c.partner_id,
                "partner": (c.partner.full_name if c.partner else None) or c.partner_id,
                "last_message": c.last_message,
                "last_message_time": c.last_message_time,
                "unread": c.unread_count,
            }
            for c in rows
        ],
    }


def cmd_send_message(api: ApiClient, state: AppState, args: argparse.Namespace) -> dict[str, Any]:
    inbox = MessageInbox(api, state)
    sent = inbox.reply(args.host_id, args.text)
    return {"ok": True, "message_id": sent.key if sent else None, "conversations": len(inbox.conversations)}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rentalhub")
    p.add_argument("--base-url", default=None)
    p.add_argument("--log-level", default=None)
    p.add_argument("--log-format", default=None, choices=["json", "text"])
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("login")
    s.add_argument("--email", required=True)
    s.add_argument("--password", required=True)
    s.set_defaults(func=cmd_login)

    sub.add_parser("logout").set_defaults(func=cmd_logout)
    sub.add_parser("whoami").set_defaults(func=cmd_whoami)

    s = sub.add_parser("bookings")
    s.add_argument("--status", default="all", choices=["all", "pending", "approved", "rejected", "cancelled"])
    s.set_defaults(func=cmd_bookings)

    s = sub.add_parser("approve")
    s.add_argument("booking_id")
    s.set_defaults(func=cmd_approve)

    s = sub.add_parser("reject")
    s.add_argument("booking_id")
    s.add_argument("--reason", default=None)
    s.set_defaults(func=cmd_reject)

    s = sub.add_parser("contracts")
    s.add_argument("--role", default="tenant", choices=["tenant", "host"])
    s.set_defaults(func=cmd_contracts)

    s = sub.add_parser("create-contract")
    s.add_argument("--room-id", required=True)
    s.add_argument("--tenant-id", required=True)
    s.add_argument("--duration", default="1")
    s.add_argument("--rent-price", required=True)
    s.add_argument("--start-date", required=True, help="YYYY-MM-DD")
    s.add_argument("--terms", default="")
    s.set_defaults(func=cmd_create_contract)

    s = sub.add_parser("cancel-contract")
    s.add_argument("contract_id")
    s.set_defaults(func=cmd_cancel_contract)

    s = sub.add_parser("terminate-contract")
    s.add_argument("contract_id")
    s.set_defaults(func=cmd_terminate_contract)

    s = sub.add_parser("invoices")
    s.add_argument("contract_id")
    s.add_argument("--search", default="")
    s.add_argument("--status", default="all")
    s.add_argument("--month", default="all")
    s.set_defaults(func=cmd_invoices)

    s = sub.add_parser("add-invoice")
    s.add_argument("contract_id")
    s.add_argument("--room-id", required=True)
    s.add_argument("--user-id", default=None, help="tenant the invoice is billed to")
    s.add_argument("--month", required=True, help="YYYY-MM")
    s.add_argument("--status", default="pending", choices=["pending", "paid", "unpaid"])
    s.add_argument("--note", default="")
    s.add_argument("--item", action="append", default=[], help="type:unitPrice[:quantity[:note]]")
    s.add_argument("--invoice-id", default=None, help="update this invoice instead of creating one")
    s.set_defaults(func=cmd_add_invoice)

    s = sub.add_parser("delete-invoice")
    s.add_argument("contract_id")
    s.add_argument("invoice_id")
    s.set_defaults(func=cmd_delete_invoice)

    s = sub.add_parser("pay-contract")
    s.add_argument("contract_id")
    s.add_argument("amount", type=float)
    s.add_argument("--note", default="")
    s.add_argument("--no-browser", action="store_true")
    s.set_defaults(func=cmd_pay_contract)

    s = sub.add_parser("pay-invoice")
    s.add_argument("contract_id")
    s.add_argument("invoice_id")
    s.add_argument("--note", default="")
    s.add_argument("--no-browser", action="store_true")
    s.set_defaults(func=cmd_pay_invoice)

    sub.add_parser("payments").set_defaults(func=cmd_payments)

    s = sub.add_parser("stats")
    s.add_argument("--admin", action="store_true")
    s.add_argument("--from", dest="date_from", default=None)
    s.add_argument("--to", dest="date_to", default=None)
    s.set_defaults(func=cmd_stats)

    s = sub.add_parser("messages")
    s.add_argument("--search", default="")
    s.add_argument("--read", default="all", choices=["all", "read", "unread"])
    s.add_argument("--mark-read", default=None, metavar="PARTNER_ID")
    s.set_defaults(func=cmd_messages)

    s = sub.add_parser("send-message")
    s.add_argument("host_id", help="receiver")
    s.add_argument("text")
    s.set_defaults(func=cmd_send_message)

    s = sub.add_parser("serve-result")
    s.add_argument("--host", default=None)
    s.add_argument("--port", type=int, default=None)
    s.set_defaults(func=None)

    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_format)

    if args.command == "serve-result":
        serve(args.host, args.port)
        return 0

    state = StateStore(settings.state_file).load()
    with request_id_scope(), ApiClient(state, base_url=args.base_url) as api:
        try:
            out = args.func(api, state, args)
        except (RentalHubError, FormValidationError) as e:
            print({"ok": False, "error": user_message(e, getattr(e, "message", None) or DEFAULT_FALLBACK)})
            return 1

    print(out)
    return 0 if out.get("ok", True) else 1


if __name__ == "__main__":
    sys.exit(main())
