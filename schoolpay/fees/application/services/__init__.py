"""Application services for recording and summarizing payments."""

__all__ = [
    "PaymentRecordingService",
    "apply_payment",
    "generate_reference",
    "is_valid_reference",
    "validate_allocations",
    "CategoryTotal",
    "PaymentSummary",
    "summarize_payments",
]

from .payment_recording import (
    PaymentRecordingService,
    apply_payment,
    generate_reference,
    is_valid_reference,
    validate_allocations,
)
from .payment_summary import CategoryTotal, PaymentSummary, summarize_payments
