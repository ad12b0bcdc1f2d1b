"""Allocation of a payment across a student's outstanding fee categories."""

from .engine import AllocationEngine, AllocationSink

__all__ = ["AllocationEngine", "AllocationSink"]
