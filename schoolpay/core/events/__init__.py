"""Domain event system for SchoolPay.

Lets the hosting application react to payment lifecycle changes (persist the
record, post a journal entry, send a receipt) without the fee services
knowing about those collaborators.

Example:
    >>> from schoolpay.core.events import PaymentRecordedEvent, get_global_event_bus
    >>> bus = get_global_event_bus()
    >>> bus.subscribe(PaymentRecordedEvent, save_payment)
"""

from __future__ import annotations

__all__ = [
    # Base
    "BaseEvent",
    "EventBus",
    "GlobalEventBus",
    "get_global_event_bus",
    # Payment events
    "PaymentRecordedEvent",
    "PaymentStatusChangedEvent",
]

from .base import BaseEvent, EventBus, GlobalEventBus, get_global_event_bus
from .payment_events import PaymentRecordedEvent, PaymentStatusChangedEvent
