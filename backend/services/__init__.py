"""Services module - multi-collection workflows and external service integrations"""
from .applications import (
    submit_application, list_pending, get_application,
    approve_application, reject_application
)
from .payments import (
    create_payment_intent, save_payment_info, reconcile_payment,
    get_booking, financial_overview
)

__all__ = [
    'submit_application', 'list_pending', 'get_application',
    'approve_application', 'reject_application',
    'create_payment_intent', 'save_payment_info', 'reconcile_payment',
    'get_booking', 'financial_overview'
]
