"""Recording payments against student fee assignments.

Key responsibilities:
- Validate that allocation rows add up to the payment amount
- Generate payment references (PAY-YYYY-XXXXXXXX)
- Apply allocations to the fee assignment and derive its new status
- Enforce the payment status lifecycle
- Publish payment events for the hosting application to persist
"""

import re
import secrets
import string
from collections.abc import Sequence
from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal

from schoolpay.core.events.base import EventBus, get_global_event_bus
from schoolpay.core.events.payment_events import PaymentRecordedEvent, PaymentStatusChangedEvent
from schoolpay.exceptions import (
    AllocationMismatchError,
    PaymentError,
    PaymentStateError,
    ValidationError,
)
from schoolpay.utils.config import Settings, get_settings
from schoolpay.utils.logging import get_logger, log_payment_recorded, log_payment_status_changed

from ...domain.enums import PaymentStatus
from ...domain.models import FeeAssignment, PaymentRecord
from ...domain.money import ZERO
from ...domain.value_objects import PaymentAllocation
from ..schemas import PaymentDraft

logger = get_logger(__name__)

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
_REFERENCE_SUFFIX_LENGTH = 8


def generate_reference(year: int | None = None, *, prefix: str | None = None) -> str:
    """Generate a payment reference such as ``PAY-2025-7KQ2M9XA``."""
    if year is None:
        year = datetime.now(UTC).year
    if prefix is None:
        prefix = get_settings().reference_prefix
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(_REFERENCE_SUFFIX_LENGTH))
    return f"{prefix}-{year:04d}-{suffix}"


def is_valid_reference(reference: str, *, prefix: str | None = None) -> bool:
    """Check a reference against the ``PREFIX-YYYY-XXXXXXXX`` format."""
    if prefix is None:
        prefix = get_settings().reference_prefix
    pattern = rf"^{re.escape(prefix)}-\d{{4}}-[A-Z0-9]{{{_REFERENCE_SUFFIX_LENGTH}}}$"
    return re.match(pattern, reference) is not None


def validate_allocations(
    amount: Decimal,
    allocations: Sequence[PaymentAllocation],
    *,
    max_allocations: int | None = None,
) -> Decimal:
    """Validate allocation rows submitted with a payment.

    Args:
        amount: Payment amount
        allocations: Rows produced by the allocation engine (or edited by hand)
        max_allocations: Row limit; defaults to ``Settings.max_allocations_per_payment``

    Returns:
        The allocated total (equal to ``amount``)

    Raises:
        ValidationError: If a row is malformed or rows are missing/too many
        AllocationMismatchError: If the rows do not add up to ``amount``
    """
    if max_allocations is None:
        max_allocations = get_settings().max_allocations_per_payment

    if not allocations:
        raise ValidationError(
            "Payment must have at least one fee allocation",
            field="fee_allocations",
            constraint="min_length=1",
        )
    if len(allocations) > max_allocations:
        raise ValidationError(
            f"Payment cannot have more than {max_allocations} fee allocations",
            field="fee_allocations",
            value=len(allocations),
            constraint=f"max_length={max_allocations}",
        )

    seen: set[str] = set()
    for position, allocation in enumerate(allocations, start=1):
        if not allocation.category_id.strip():
            raise ValidationError(
                f"Fee allocation {position} must have a category ID",
                field="category_id",
            )
        if not allocation.category_name.strip():
            raise ValidationError(
                f"Fee allocation {position} must have a category name",
                field="category_name",
            )
        if allocation.category_id in seen:
            raise ValidationError(
                f"Fee allocation {position} repeats category {allocation.category_id}",
                field="category_id",
                value=allocation.category_id,
                constraint="unique",
            )
        seen.add(allocation.category_id)

    total = sum((a.amount for a in allocations), ZERO)
    if total != amount:
        raise AllocationMismatchError(
            "Payment allocations do not match payment amount",
            expected=amount,
            allocated=total,
        )
    return total


def apply_payment(
    assignment: FeeAssignment, allocations: Sequence[PaymentAllocation]
) -> FeeAssignment:
    """Return ``assignment`` with ``allocations`` paid into its line items.

    Raises:
        PaymentError: If an allocation targets a category the assignment does
            not contain, or exceeds that category's balance
    """
    paid_by_category: dict[str, Decimal] = {}
    for allocation in allocations:
        paid_by_category[allocation.category_id] = (
            paid_by_category.get(allocation.category_id, ZERO) + allocation.amount
        )

    items = []
    for item in assignment.fee_items:
        paid = paid_by_category.pop(item.category_id, None)
        if paid is None:
            items.append(item)
            continue
        if paid > item.balance:
            raise PaymentError(
                f"Allocation to {item.category_name} exceeds its outstanding balance",
                context={
                    "category_id": item.category_id,
                    "balance": str(item.balance),
                    "allocated": str(paid),
                },
            )
        items.append(item.with_payment(paid))

    if paid_by_category:
        raise PaymentError(
            "Allocation references a fee category not on the assignment",
            context={
                "fee_assignment_id": assignment.id,
                "category_ids": ", ".join(sorted(paid_by_category)),
            },
        )

    return replace(assignment, fee_items=tuple(items))


class PaymentRecordingService:
    """Validate, apply and announce student payments.

    Persisting the returned record and assignment is left to subscribers of
    :class:`PaymentRecordedEvent` or to the caller.
    """

    def __init__(
        self,
        event_bus: EventBus | None = None,
        settings: Settings | None = None,
        enable_event_publishing: bool = True,
    ):
        """Initialize the service.

        Args:
            event_bus: Bus to publish on (defaults to the global bus)
            settings: Settings override (defaults to cached settings)
            enable_event_publishing: Whether to publish events (disable for testing)
        """
        self.settings = settings or get_settings()
        self.event_bus: EventBus = event_bus or get_global_event_bus()
        self.enable_events = enable_event_publishing

    def record(
        self,
        draft: PaymentDraft,
        assignment: FeeAssignment,
        *,
        reference: str | None = None,
    ) -> tuple[PaymentRecord, FeeAssignment]:
        """Record a confirmed payment against ``assignment``.

        Returns:
            The payment record and the updated fee assignment

        Raises:
            ValidationError: Malformed allocations or reference
            AllocationMismatchError: Allocations do not add up to the amount
            PaymentError: Assignment mismatch or allocation above a balance
        """
        if assignment.id and draft.fee_assignment_id != assignment.id:
            raise PaymentError(
                "Payment targets a different fee assignment",
                context={
                    "draft_assignment": draft.fee_assignment_id,
                    "assignment": assignment.id,
                },
            )

        allocations = tuple(a.to_domain() for a in draft.fee_allocations)
        validate_allocations(
            draft.amount,
            allocations,
            max_allocations=self.settings.max_allocations_per_payment,
        )

        if reference is None:
            reference = generate_reference(
                draft.payment_date.year, prefix=self.settings.reference_prefix
            )
        elif not is_valid_reference(reference, prefix=self.settings.reference_prefix):
            raise ValidationError(
                "Payment reference must follow format: "
                f"{self.settings.reference_prefix}-YYYY-XXXXXXXX",
                field="reference",
                value=reference,
            )

        updated = apply_payment(assignment, allocations)

        record = PaymentRecord(
            reference=reference,
            student_id=draft.student_id,
            student_name=draft.student_name,
            class_id=draft.class_id,
            class_name=draft.class_name,
            fee_assignment_id=draft.fee_assignment_id,
            amount=draft.amount,
            payment_method=draft.payment_method,
            payment_date=draft.payment_date,
            fee_allocations=allocations,
            paid_by=draft.paid_by,
            notes=draft.notes,
            recorded_by=draft.recorded_by,
            status=PaymentStatus.CONFIRMED,
        )

        log_payment_recorded(
            logger,
            reference=record.reference,
            student_id=record.student_id,
            fee_assignment_id=record.fee_assignment_id,
            amount=record.amount,
        )

        if self.enable_events:
            self.event_bus.publish(
                PaymentRecordedEvent(
                    reference=record.reference,
                    student_id=record.student_id,
                    fee_assignment_id=record.fee_assignment_id,
                    amount=record.amount,
                    allocation_count=len(allocations),
                    assignment_balance=updated.balance,
                    assignment_status=updated.status.value,
                    currency=self.settings.currency_code,
                )
            )

        return record, updated

    def transition(
        self,
        record: PaymentRecord,
        new_status: PaymentStatus,
        notes: str | None = None,
    ) -> PaymentRecord:
        """Move a payment to ``new_status``.

        Cancelling or refunding requires a reason in ``notes``.

        Raises:
            PaymentStateError: If the transition is not allowed
        """
        new_status = PaymentStatus(new_status)
        if new_status == record.status:
            return record

        if not record.status.can_transition_to(new_status):
            raise PaymentStateError(
                f"Invalid status transition from '{record.status.value}' to '{new_status.value}'",
                reference=record.reference,
                current_status=record.status.value,
                requested_status=new_status.value,
            )

        if new_status.requires_reason and not (notes and notes.strip()):
            raise PaymentStateError(
                f"{new_status.value.capitalize()} payments must include a reason in notes",
                reference=record.reference,
                current_status=record.status.value,
                requested_status=new_status.value,
            )

        updated = replace(
            record,
            status=new_status,
            notes=notes.strip() if notes else record.notes,
            updated_at=datetime.now(UTC),
        )

        log_payment_status_changed(
            logger,
            reference=record.reference,
            old_status=record.status.value,
            new_status=new_status.value,
        )

        if self.enable_events:
            self.event_bus.publish(
                PaymentStatusChangedEvent(
                    reference=record.reference,
                    old_status=record.status.value,
                    new_status=new_status.value,
                    notes=updated.notes,
                )
            )

        return updated
