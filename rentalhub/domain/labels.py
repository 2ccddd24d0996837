# rentalhub/domain/labels.py
from __future__ import annotations

from typing import Optional

UNKNOWN_STATUS_LABEL = "Không xác định"

STATUS_LABELS: dict[str, str] = {
    "active": "Đang hoạt động",
    "expired": "Hết hạn",
    "terminated": "Đã chấm dứt",
    "cancel": "Hủy hợp đồng",
    "pending": "Đang chờ xử lý",
    "approved": "Đã phê duyệt",
    "rejected": "Bị từ chối",
    "available": "Có sẵn",
    "single": "Phòng đơn",
    "shared": "Phòng chung",
    "apartment": "Căn hộ",
    "failed": "Thất bại",
    "paid": "Thành công",
}


def convert_status(status: Optional[str]) -> str:
    return STATUS_LABELS.get(status or "", UNKNOWN_STATUS_LABEL)


def format_currency(amount: Optional[float]) -> str:
    """vi-VN VND rendering: 1.500.000 ₫ (no decimals, dot thousands)."""
    n = int(round(float(amount or 0)))
    sign = "-" if n < 0 else ""
    grouped = f"{abs(n):,}".replace(",", ".")
    return f"{sign}{grouped} ₫"


def truncate(s: Optional[str], max_length: int = 40) -> str:
    if not s:
        return ""
    return s[:max_length] + "..." if len(s) > max_length else s
