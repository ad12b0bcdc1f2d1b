"""Payment lifecycle events.

Events emitted when a payment is recorded against a fee assignment or when
its status changes. Subscribers persist the records or post journal entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .base import BaseEvent


@dataclass(frozen=True)
class PaymentRecordedEvent(BaseEvent):
    """Event emitted after a payment has been validated and applied.

    Carries the reference and the updated assignment balance so listeners do
    not need to recompute it.
    """

    reference: str
    student_id: str
    fee_assignment_id: str
    amount: Decimal
    allocation_count: int
    assignment_balance: Decimal
    assignment_status: str
    currency: str = "NGN"


@dataclass(frozen=True)
class PaymentStatusChangedEvent(BaseEvent):
    """Event emitted when a payment moves through its status lifecycle."""

    reference: str
    old_status: str
    new_status: str
    notes: str | None = None
