# rentalhub/domain/__init__.py
from .dates import add_months, calc_end_date, contract_duration, month_span
from .invoices import InvoiceDraft, calculate_total, validate_invoice_form
from .labels import convert_status, format_currency

__all__ = [
    "add_months",
    "calc_end_date",
    "contract_duration",
    "month_span",
    "InvoiceDraft",
    "calculate_total",
    "validate_invoice_form",
    "convert_status",
    "format_currency",
]
