"""
Pytest configuration and global fixtures.

This module provides shared fixtures used across all tests.
"""

from collections.abc import Callable, Generator
from datetime import date
from decimal import Decimal

import pytest

from schoolpay.core.events.base import GlobalEventBus
from schoolpay.fees.application.schemas import AllocationInput, PaymentDraft
from schoolpay.fees.domain.enums import FeeType, PaymentMethod, Term
from schoolpay.fees.domain.models import FeeAssignment, FeeLineItem
from schoolpay.utils.config import Settings, reload_settings

ItemFactory = Callable[..., FeeLineItem]


def fee_type_for(category_id: str) -> FeeType:
    try:
        return FeeType(category_id)
    except ValueError:
        return FeeType.OTHER


@pytest.fixture
def make_item() -> ItemFactory:
    """Factory for fee line items with sensible defaults."""

    def _make(
        category_id: str,
        balance: str | int | Decimal,
        *,
        mandatory: bool = False,
        fee_type: FeeType | None = None,
        name: str | None = None,
        amount: str | int | Decimal | None = None,
    ) -> FeeLineItem:
        return FeeLineItem(
            category_id=category_id,
            category_name=name or category_id.replace("_", " ").title(),
            type=fee_type or fee_type_for(category_id),
            balance=Decimal(str(balance)),
            is_mandatory=mandatory,
            amount=None if amount is None else Decimal(str(amount)),
        )

    return _make


@pytest.fixture
def tuition_uniform_assignment(make_item: ItemFactory) -> FeeAssignment:
    """Assignment with mandatory tuition (20,000) and optional uniform (5,000)."""
    return FeeAssignment(
        fee_items=(
            make_item("tuition", "20000", mandatory=True),
            make_item("uniform", "5000"),
        ),
        id="assign-001",
        student_id="stu-001",
        student_name="Ada Obi",
        class_name="JSS 1",
        academic_year="2025/2026",
        term=Term.FIRST,
    )


@pytest.fixture
def event_bus() -> GlobalEventBus:
    """Create a fresh event bus for each test."""
    return GlobalEventBus()


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of the developer's environment."""
    return Settings(
        _env_file=None,
        currency_code="NGN",
        currency_symbol="₦",
        minor_unit_digits=2,
        max_allocations_per_payment=20,
        reference_prefix="PAY",
    )


@pytest.fixture
def fresh_settings(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[Callable[[], Settings], None, None]:
    """Reload cached settings after environment changes, and restore them afterwards."""
    yield reload_settings
    monkeypatch.undo()
    reload_settings()


@pytest.fixture
def make_draft() -> Callable[..., PaymentDraft]:
    """Factory for payment drafts against ``assign-001``."""

    def _make(
        amount: str,
        allocations: list[tuple[str, str]],
        **overrides,
    ) -> PaymentDraft:
        data = {
            "student_id": "stu-001",
            "student_name": "Ada Obi",
            "class_id": "jss1",
            "class_name": "JSS 1",
            "fee_assignment_id": "assign-001",
            "amount": Decimal(amount),
            "payment_method": PaymentMethod.CASH,
            "payment_date": date(2025, 9, 15),
            "fee_allocations": [
                AllocationInput(
                    category_id=category_id,
                    category_name=category_id.title(),
                    type=fee_type_for(category_id),
                    amount=Decimal(value),
                )
                for category_id, value in allocations
            ],
            "recorded_by": "bursar-01",
        }
        data.update(overrides)
        return PaymentDraft(**data)

    return _make
