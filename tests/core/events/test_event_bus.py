"""Unit tests for GlobalEventBus."""

from dataclasses import dataclass
from decimal import Decimal

import pytest

from schoolpay.core.events.base import BaseEvent, GlobalEventBus, get_global_event_bus
from schoolpay.core.events.payment_events import PaymentRecordedEvent, PaymentStatusChangedEvent


@dataclass(frozen=True)
class SampleEvent(BaseEvent):
    """Simple event for unit testing."""

    message: str = "test"


@dataclass(frozen=True)
class ChildSampleEvent(SampleEvent):
    """Child event for inheritance testing."""

    child_data: str = "child"


@pytest.fixture
def sample_event():
    return SampleEvent(message="Hello Event Bus")


@pytest.fixture
def recorded_event():
    return PaymentRecordedEvent(
        reference="PAY-2025-AB12CD34",
        student_id="stu-001",
        fee_assignment_id="assign-001",
        amount=Decimal("18000.00"),
        allocation_count=1,
        assignment_balance=Decimal("7000.00"),
        assignment_status="partial",
    )


def test_subscribe_handler(event_bus):
    """Test that handlers can be registered."""

    def handler(event: SampleEvent):
        pass

    event_bus.subscribe(SampleEvent, handler)

    assert SampleEvent in event_bus._handlers
    assert len(event_bus._handlers[SampleEvent]) == 1
    assert event_bus._handlers[SampleEvent][0].handler == handler


def test_publish(event_bus, sample_event):
    """Test synchronous event publishing."""
    received_events = []

    event_bus.subscribe(SampleEvent, received_events.append)
    event_bus.publish(sample_event)

    assert received_events == [sample_event]
    assert received_events[0].message == "Hello Event Bus"


def test_events_carry_metadata(recorded_event):
    other = PaymentStatusChangedEvent(
        reference="PAY-2025-AB12CD34", old_status="confirmed", new_status="refunded"
    )

    assert recorded_event.event_id != other.event_id
    assert recorded_event.occurred_at.tzinfo is not None
    assert recorded_event.currency == "NGN"
    assert recorded_event.context is None


def test_handler_priority(event_bus, sample_event):
    """Test that handlers are executed in priority order (higher first)."""
    execution_order = []

    def low_priority(event: SampleEvent):
        execution_order.append("low")

    def medium_priority(event: SampleEvent):
        execution_order.append("medium")

    def high_priority(event: SampleEvent):
        execution_order.append("high")

    event_bus.subscribe(SampleEvent, medium_priority, priority=5)
    event_bus.subscribe(SampleEvent, low_priority, priority=1)
    event_bus.subscribe(SampleEvent, high_priority, priority=10)

    event_bus.publish(sample_event)

    assert execution_order == ["high", "medium", "low"]


def test_handler_error_isolation(event_bus, sample_event):
    """Test that one handler failure doesn't affect others."""
    successful_handlers = []

    def failing_handler(event: SampleEvent):
        raise ValueError("Handler failed!")

    def successful_handler_1(event: SampleEvent):
        successful_handlers.append(1)

    def successful_handler_2(event: SampleEvent):
        successful_handlers.append(2)

    event_bus.subscribe(SampleEvent, successful_handler_1)
    event_bus.subscribe(SampleEvent, failing_handler)
    event_bus.subscribe(SampleEvent, successful_handler_2)

    # Publish should not raise despite failing handler
    event_bus.publish(sample_event)

    assert sorted(successful_handlers) == [1, 2]


def test_event_type_filtering(event_bus):
    """Test that only handlers matching event type receive events."""
    sample_received = []
    child_received = []

    event_bus.subscribe(SampleEvent, sample_received.append)
    event_bus.subscribe(ChildSampleEvent, child_received.append)

    event_bus.publish(SampleEvent(message="test"))

    assert len(sample_received) == 1
    assert len(child_received) == 0

    sample_received.clear()

    event_bus.publish(ChildSampleEvent(message="child", child_data="data"))

    # Both handlers receive it (inheritance)
    assert len(sample_received) == 1
    assert len(child_received) == 1


def test_unsubscribe_handler(event_bus, sample_event):
    """Test handler removal."""
    handler_called = []

    def handler(event: SampleEvent):
        handler_called.append(event)

    event_bus.subscribe(SampleEvent, handler)
    event_bus.publish(sample_event)
    event_bus.unsubscribe(SampleEvent, handler)
    event_bus.publish(sample_event)

    assert len(handler_called) == 1


def test_unsubscribe_unknown_type_is_ignored(event_bus):
    event_bus.unsubscribe(SampleEvent, print)

    assert event_bus.get_stats()["total_handlers"] == 0


def test_get_stats(event_bus, recorded_event):
    """Test event bus statistics."""

    def handler1(event: BaseEvent):
        pass

    def handler2(event: BaseEvent):
        pass

    event_bus.subscribe(SampleEvent, handler1)
    event_bus.subscribe(SampleEvent, handler2)
    event_bus.subscribe(PaymentRecordedEvent, handler1)

    event_bus.publish(SampleEvent(message="test1"))
    event_bus.publish(SampleEvent(message="test2"))
    event_bus.publish(recorded_event)

    stats = event_bus.get_stats()

    assert stats["total_handlers"] == 3
    assert stats["event_types"] == 2
    assert stats["events_published"]["SampleEvent"] == 2
    assert stats["events_published"]["PaymentRecordedEvent"] == 1
    assert stats["total_events"] == 3


def test_singleton_instance():
    """Test that get_global_event_bus returns singleton instance."""
    assert get_global_event_bus() is get_global_event_bus()


def test_event_inheritance(event_bus, recorded_event):
    """Test that BaseEvent subscribers receive all event types."""
    all_events_received = []

    event_bus.subscribe(BaseEvent, all_events_received.append)

    event_bus.publish(SampleEvent(message="test"))
    event_bus.publish(recorded_event)

    assert len(all_events_received) == 2


def test_fresh_bus_is_isolated():
    assert GlobalEventBus().get_stats()["total_events"] == 0
