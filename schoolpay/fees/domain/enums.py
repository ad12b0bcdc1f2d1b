"""Domain enums for fee assignments and payments."""

from enum import Enum


class FeeType(str, Enum):
    """Classification tag of a fee category."""

    TUITION = "tuition"
    UNIFORM = "uniform"
    FEEDING = "feeding"
    TRANSPORT = "transport"
    BOOKS = "books"
    SPORTS = "sports"
    DEVELOPMENT = "development"
    EXAMINATION = "examination"
    PTA = "pta"
    COMPUTER = "computer"
    LIBRARY = "library"
    LABORATORY = "laboratory"
    LESSON = "lesson"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class Term(str, Enum):
    """Academic term a fee assignment bills for."""

    FIRST = "first"
    SECOND = "second"
    THIRD = "third"

    def __str__(self) -> str:
        return self.value


class AssignmentStatus(str, Enum):
    """Payment status of a student's fee assignment.

    Derived from the assignment balance after each payment:
        nothing paid       → UNPAID
        balance > 0        → PARTIAL
        balance == 0       → PAID
        balance < 0        → OVERPAID
    """

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    OVERPAID = "overpaid"

    def __str__(self) -> str:
        return self.value


class PaymentMethod(str, Enum):
    """How the payer settled the payment."""

    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    POS = "pos"
    ONLINE = "online"
    CHEQUE = "cheque"

    def __str__(self) -> str:
        return self.value


class PaymentStatus(str, Enum):
    """Payment record status.

    Lifecycle:
        PENDING → CONFIRMED | CANCELLED
        CONFIRMED → REFUNDED
        CANCELLED, REFUNDED are terminal
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is allowed."""
        return not _PAYMENT_TRANSITIONS[self]

    @property
    def requires_reason(self) -> bool:
        """Whether entering this status needs an explanatory note."""
        return self in (PaymentStatus.CANCELLED, PaymentStatus.REFUNDED)

    def can_transition_to(self, new_status: "PaymentStatus") -> bool:
        """Check whether moving to ``new_status`` is allowed."""
        return new_status in _PAYMENT_TRANSITIONS[self]


_PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.CONFIRMED, PaymentStatus.CANCELLED}),
    PaymentStatus.CONFIRMED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.CANCELLED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}


class AllocationState(str, Enum):
    """What the allocation engine has to work with."""

    NO_ASSIGNMENTS = "no_assignments"  # No fee line items at all
    SETTLED = "settled"  # Line items exist but every balance is zero
    OUTSTANDING = "outstanding"  # At least one balance left to allocate

    def __str__(self) -> str:
        return self.value
