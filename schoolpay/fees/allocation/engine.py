"""Payment allocation engine.

Distributes one payment amount across a student's outstanding fee
categories. Two modes are kept consistent:

- automatic: mandatory fees first, then larger balances, each category
  receiving as much as it can take until the payment runs out;
- manual: the user edits individual categories, amounts are clamped to the
  category balance, and automatic recomputation stays off until it is
  explicitly re-enabled.

The engine is synchronous and owned by a single payment-entry session.
Every mutating call recomputes the derived allocations and hands them to the
``on_change`` sink before returning.
"""

from collections.abc import Callable, Iterable
from dataclasses import replace
from decimal import Decimal

from schoolpay.utils.logging import get_logger

from ..domain.enums import AllocationState
from ..domain.models import FeeAssignment, FeeLineItem
from ..domain.money import ZERO, AmountLike, clamp, format_amount, to_amount
from ..domain.value_objects import AllocationItem, AllocationSummary, PaymentAllocation

logger = get_logger(__name__)

AllocationSink = Callable[[list[PaymentAllocation]], None]


class AllocationEngine:
    """Working set of per-category allocations for one payment.

    Args:
        fee_assignments: Assignments whose line items can receive money
        payment_amount: Amount being paid; used whenever auto mode recomputes
        on_change: Called with the non-zero allocations after every change
        auto_allocate: Initial mode; automatic allocation is on by default

    Example:
        >>> engine = AllocationEngine([assignment], payment_amount="18000")
        >>> engine.total_allocated()
        Decimal('18000.00')
        >>> engine.set_allocation("uniform", 2000)  # switches to manual mode
    """

    def __init__(
        self,
        fee_assignments: Iterable[FeeAssignment] = (),
        *,
        payment_amount: AmountLike = 0,
        on_change: AllocationSink | None = None,
        auto_allocate: bool = True,
    ) -> None:
        self._allocations: list[AllocationItem] = []
        self._by_category: dict[str, AllocationItem] = {}
        self._line_items: dict[str, FeeLineItem] = {}
        self._payment_amount = to_amount(payment_amount)
        self._on_change = on_change
        self.auto_allocate_enabled = auto_allocate
        self.initialize(fee_assignments)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def initialize(self, fee_assignments: Iterable[FeeAssignment]) -> list[PaymentAllocation]:
        """Rebuild the working set from ``fee_assignments``.

        Previous allocations are discarded. Line items with a zero balance
        are left out. When a category id appears more than once, the first
        occurrence is kept.
        """
        allocations: list[AllocationItem] = []
        by_category: dict[str, AllocationItem] = {}
        line_items: dict[str, FeeLineItem] = {}

        for assignment in fee_assignments:
            for item in assignment.fee_items:
                if item.category_id in line_items:
                    logger.warning(
                        "duplicate_fee_category_skipped",
                        category_id=item.category_id,
                        fee_assignment_id=assignment.id,
                    )
                    continue
                line_items[item.category_id] = item
                if item.balance <= 0:
                    continue

                allocation = AllocationItem(
                    category_id=item.category_id,
                    category_name=item.category_name,
                    type=item.type,
                    max_amount=item.balance,
                    is_mandatory=item.is_mandatory,
                )
                allocations.append(allocation)
                by_category[item.category_id] = allocation

        self._allocations = allocations
        self._by_category = by_category
        self._line_items = line_items

        logger.debug(
            "allocation_working_set_built",
            line_items=len(line_items),
            allocatable=len(allocations),
            state=self.state().value,
        )

        if self.auto_allocate_enabled:
            self._distribute(self._payment_amount)
        return self._emit()

    def auto_allocate(self, payment_amount: AmountLike | None = None) -> list[PaymentAllocation]:
        """Distribute the payment by priority, replacing any previous allocation.

        Mandatory categories come first, then larger balances; ties keep
        their working-set order. A payment larger than the outstanding total
        leaves the excess unallocated. The mode flag is not changed.
        """
        if payment_amount is not None:
            self._payment_amount = to_amount(payment_amount)
        self._distribute(self._payment_amount)
        return self._emit()

    def set_payment_amount(self, payment_amount: AmountLike) -> list[PaymentAllocation]:
        """Track a new payment amount.

        Allocations are recomputed only while automatic mode is enabled;
        manual allocations are left untouched.
        """
        self._payment_amount = to_amount(payment_amount)
        if not self.auto_allocate_enabled:
            logger.debug("payment_amount_changed_manual_mode", payment_amount=self._payment_amount)
            return self.to_payment_allocations()
        self._distribute(self._payment_amount)
        return self._emit()

    def set_allocation(self, category_id: str, amount: AmountLike) -> list[PaymentAllocation]:
        """Manually set one category's allocation, clamped to ``[0, balance]``.

        Turns automatic mode off. Unknown categories are ignored.
        """
        item = self._by_category.get(category_id)
        if item is None:
            logger.debug("allocation_category_not_found", category_id=category_id)
            return self.to_payment_allocations()

        requested = to_amount(amount)
        item.allocated_amount = clamp(requested, ZERO, item.max_amount)
        self.auto_allocate_enabled = False

        if item.allocated_amount != requested:
            logger.debug(
                "allocation_clamped",
                category_id=category_id,
                requested=requested,
                allocated=item.allocated_amount,
            )
        return self._emit()

    def set_max(self, category_id: str) -> list[PaymentAllocation]:
        """Allocate a category's full balance. Same side effects as :meth:`set_allocation`."""
        item = self._by_category.get(category_id)
        if item is None:
            logger.debug("allocation_category_not_found", category_id=category_id)
            return self.to_payment_allocations()
        return self.set_allocation(category_id, item.max_amount)

    def clear_all(self) -> list[PaymentAllocation]:
        """Zero every allocation and switch to manual mode."""
        for item in self._allocations:
            item.allocated_amount = ZERO
        self.auto_allocate_enabled = False
        return self._emit()

    def enable_auto_allocate(
        self, payment_amount: AmountLike | None = None
    ) -> list[PaymentAllocation]:
        """Switch automatic mode on and redistribute the payment."""
        self.auto_allocate_enabled = True
        return self.auto_allocate(payment_amount)

    def disable_auto_allocate(self) -> None:
        """Switch automatic mode off, keeping current allocations."""
        self.auto_allocate_enabled = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def payment_amount(self) -> Decimal:
        return self._payment_amount

    @property
    def allocations(self) -> tuple[AllocationItem, ...]:
        """Copies of the working records, in working-set order."""
        return tuple(replace(item) for item in self._allocations)

    def get_allocation(self, category_id: str) -> AllocationItem | None:
        item = self._by_category.get(category_id)
        return None if item is None else replace(item)

    def line_item(self, category_id: str) -> FeeLineItem | None:
        """Source line item of a category, including settled ones."""
        return self._line_items.get(category_id)

    def total_allocated(self) -> Decimal:
        return sum((item.allocated_amount for item in self._allocations), ZERO)

    def outstanding_balance(self) -> Decimal:
        return sum((item.max_amount for item in self._allocations), ZERO)

    def remaining_unallocated(self, payment_amount: AmountLike | None = None) -> Decimal:
        """Payment left without a category; negative when over-allocated."""
        return self._resolve_amount(payment_amount) - self.total_allocated()

    def is_valid(self, payment_amount: AmountLike | None = None) -> bool:
        """Whether allocations add up exactly to the payment amount."""
        return self.total_allocated() == self._resolve_amount(payment_amount)

    def state(self) -> AllocationState:
        if not self._line_items:
            return AllocationState.NO_ASSIGNMENTS
        if not self._allocations:
            return AllocationState.SETTLED
        return AllocationState.OUTSTANDING

    def to_payment_allocations(self) -> list[PaymentAllocation]:
        """Non-zero allocations in working-set order."""
        return [
            item.to_payment_allocation() for item in self._allocations if item.allocated_amount > 0
        ]

    def validation_message(self, payment_amount: AmountLike | None = None) -> str | None:
        """Message blocking submission, or None when the allocation is valid."""
        remaining = self.remaining_unallocated(payment_amount)
        if remaining == 0:
            return None
        if remaining > 0:
            hint = f"Please allocate the remaining {format_amount(remaining)}."
        else:
            hint = f"Please reduce allocation by {format_amount(-remaining)}."
        return f"Total allocation must equal payment amount. {hint}"

    def summary(self, payment_amount: AmountLike | None = None) -> AllocationSummary:
        amount = self._resolve_amount(payment_amount)
        allocated = self.total_allocated()
        return AllocationSummary(
            payment_amount=amount,
            total_allocated=allocated,
            remaining=amount - allocated,
            is_valid=allocated == amount,
            state=self.state(),
            auto_allocate_enabled=self.auto_allocate_enabled,
            allocations=tuple(self.to_payment_allocations()),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_amount(self, payment_amount: AmountLike | None) -> Decimal:
        if payment_amount is None:
            return self._payment_amount
        return to_amount(payment_amount)

    def _distribute(self, payment_amount: Decimal) -> None:
        for item in self._allocations:
            item.allocated_amount = ZERO

        remaining = payment_amount
        # sorted() is stable, so equal keys keep working-set order
        for item in sorted(self._allocations, key=lambda a: a.priority_key):
            if remaining <= 0:
                break
            allocated = min(remaining, item.max_amount)
            item.allocated_amount = allocated
            remaining -= allocated

        logger.debug(
            "allocation_auto_applied",
            payment_amount=payment_amount,
            allocated=self.total_allocated(),
            unallocated=max(remaining, ZERO),
        )

    def _emit(self) -> list[PaymentAllocation]:
        result = self.to_payment_allocations()
        if self._on_change is not None:
            self._on_change(list(result))
        return result
