# rentalhub/web/result_page.py
from __future__ import annotations

import html
from typing import Optional

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.responses import HTMLResponse

from ..config import settings
from ..middleware.request_id import RequestIDMiddleware

VNPAY_SUCCESS_CODE = "00"

SUCCESS_TITLE = "Thanh toán thành công"
FAILURE_TITLE = "Thanh toán thất bại"

router = APIRouter(tags=["payment"])


def is_success(response_code: Optional[str]) -> bool:
    return (response_code or "").strip() == VNPAY_SUCCESS_CODE


def render_result(*, success: bool, ref: Optional[str]) -> str:
    """
    Static landing page. It only reflects what the redirect said; the
    payment record itself is confirmed by the backend.
    """
    title = SUCCESS_TITLE if success else FAILURE_TITLE
    ref_line = f"<p>Mã giao dịch: <code>{html.escape(ref)}</code></p>" if ref else ""
    return (
        "<!doctype html>"
        '<html lang="vi"><head><meta charset="utf-8">'
        f"<title>{title}</title></head>"
        f'<body><main class="{"success" if success else "failure"}">'
        f"<h1>{title}</h1>{ref_line}"
        "<p>Bạn có thể đóng trang này và quay lại ứng dụng.</p>"
        "</main></body></html>"
    )


@router.get("/payment/result", response_class=HTMLResponse)
def payment_result(vnp_ResponseCode: Optional[str] = None, vnp_TxnRef: Optional[str] = None, ref: Optional[str] = None):
    ok = is_success(vnp_ResponseCode)
    return HTMLResponse(render_result(success=ok, ref=vnp_TxnRef or ref), status_code=200)


# The backend's return handler redirects the browser to one of these two.
@router.get("/success-page", response_class=HTMLResponse)
def success_page(ref: Optional[str] = None):
    return HTMLResponse(render_result(success=True, ref=ref))


@router.get("/fail-page", response_class=HTMLResponse)
def fail_page(ref: Optional[str] = None):
    return HTMLResponse(render_result(success=False, ref=ref))


@router.get("/health", response_model=dict)
def health():
    return {"ok": True, "env": settings.app_env}


def create_app() -> FastAPI:
    app = FastAPI(title="RentalHub payment result", version="dev")
    app.add_middleware(RequestIDMiddleware)
    app.include_router(router)
    return app


def serve(host: Optional[str] = None, port: Optional[int] = None) -> None:
    uvicorn.run(
        create_app(),
        host=host or settings.result_page_host,
        port=int(port or settings.result_page_port),
        log_config=None,
    )
