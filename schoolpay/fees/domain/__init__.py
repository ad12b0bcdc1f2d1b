"""Fee and payment domain: enums, models, value objects and money helpers."""

from .enums import (
    AllocationState,
    AssignmentStatus,
    FeeType,
    PaymentMethod,
    PaymentStatus,
    Term,
)
from .models import FeeAssignment, FeeLineItem, PaymentRecord, derive_status
from .money import ZERO, format_amount, to_amount
from .value_objects import AllocationItem, AllocationSummary, PaymentAllocation

__all__ = [
    "AllocationItem",
    "AllocationState",
    "AllocationSummary",
    "AssignmentStatus",
    "FeeAssignment",
    "FeeLineItem",
    "FeeType",
    "PaymentAllocation",
    "PaymentMethod",
    "PaymentRecord",
    "PaymentStatus",
    "Term",
    "ZERO",
    "derive_status",
    "format_amount",
    "to_amount",
]
