"""Student fee payments: allocation engine, payment recording and summaries.

Architecture follows a domain / application split:
- domain: fee assignments, payment records, money helpers
- allocation: the per-category allocation engine
- application: recording payments against assignments, summaries
- cli: command-line front end over the engine
"""

__all__ = [
    "AllocationEngine",
    "FeeAssignment",
    "FeeLineItem",
    "PaymentAllocation",
]

from .allocation import AllocationEngine
from .domain import FeeAssignment, FeeLineItem, PaymentAllocation
