# rentalhub/workflows/__init__.py
from .checkout import CheckoutFlow
from .contracts import ContractActionOutcome, ContractWorkflow
from .dashboard import AdminOverview, DashboardWorkflow
from .invoices import InvoiceManager
from .rental_requests import ApprovalOutcome, RentalRequestWorkflow

__all__ = [
    "CheckoutFlow",
    "ContractActionOutcome",
    "ContractWorkflow",
    "AdminOverview",
    "DashboardWorkflow",
    "InvoiceManager",
    "ApprovalOutcome",
    "RentalRequestWorkflow",
]
