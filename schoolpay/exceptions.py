"""Standardized exception hierarchy for SchoolPay.

All exceptions carry structured context so they can be logged with
structlog without losing detail.

Usage:
    from schoolpay.exceptions import ValidationError, PaymentError

    try:
        service.record(draft, assignment)
    except ValidationError as e:
        logger.error("payment_rejected", error=str(e), context=e.context)
"""

from __future__ import annotations

from typing import Any


class SchoolPayError(Exception):
    """Base exception for all SchoolPay errors.

    Attributes:
        message: Human-readable error message
        context: Additional context for debugging (dict)
        original_error: Original exception if wrapped
    """

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        """Format exception with context for logging."""
        base = self.message
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({ctx_str})"
        if self.original_error:
            base = f"{base} [caused by: {type(self.original_error).__name__}]"
        return base

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# =============================================================================
# Validation & Input Errors
# =============================================================================


class ValidationError(SchoolPayError):
    """Raised when input validation fails.

    Used for malformed amounts, invalid payment drafts, or allocation rows
    that break a constraint.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize validation error.

        Args:
            message: Error description
            field: Name of the invalid field
            value: The invalid value (truncated in context)
            constraint: Validation constraint that was violated
            **kwargs: Additional context
        """
        context = kwargs.get("context") or {}
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)[:100]
        if constraint:
            context["constraint"] = constraint
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class ConfigurationError(SchoolPayError):
    """Raised when application configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
        expected: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context") or {}
        if setting:
            context["setting"] = setting
        if expected:
            context["expected"] = expected
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# =============================================================================
# Business Logic Errors
# =============================================================================


class BusinessLogicError(SchoolPayError):
    """Base class for business rule violations."""


class PaymentError(BusinessLogicError):
    """Raised when a payment cannot be applied to a fee assignment."""


class AllocationMismatchError(PaymentError):
    """Raised when fee allocations do not add up to the payment amount.

    The allocation engine only reports this condition through ``is_valid``;
    the error is raised when a payment is submitted for recording.
    """

    def __init__(
        self,
        message: str,
        *,
        expected: Any = None,
        allocated: Any = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context") or {}
        if expected is not None:
            context["expected"] = str(expected)
        if allocated is not None:
            context["allocated"] = str(allocated)
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class PaymentStateError(BusinessLogicError):
    """Raised when a payment status change violates the state machine.

    Example: refunding a payment that was cancelled.
    """

    def __init__(
        self,
        message: str,
        *,
        reference: str | None = None,
        current_status: str | None = None,
        requested_status: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context") or {}
        if reference:
            context["reference"] = reference
        if current_status:
            context["current_status"] = current_status
        if requested_status:
            context["requested_status"] = requested_status
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# =============================================================================
# File Errors
# =============================================================================


class FileOperationError(SchoolPayError):
    """Base class for file operation errors."""


class FileFormatError(FileOperationError):
    """Raised when an input file has an unreadable or unexpected format."""


# =============================================================================
# Utility Functions
# =============================================================================


def wrap_exception(
    error: Exception,
    message: str,
    *,
    exception_class: type[SchoolPayError] = SchoolPayError,
    **context: Any,
) -> SchoolPayError:
    """Wrap an external exception in the SchoolPay exception hierarchy.

    Example:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise wrap_exception(
                e,
                "Fee assignment file is not valid JSON",
                exception_class=FileFormatError,
                path=str(path),
            )
    """
    return exception_class(
        message,
        context=context,
        original_error=error,
    )


__all__ = [
    # Base
    "SchoolPayError",
    # Validation
    "ValidationError",
    "ConfigurationError",
    # Business Logic
    "BusinessLogicError",
    "PaymentError",
    "AllocationMismatchError",
    "PaymentStateError",
    # Files
    "FileOperationError",
    "FileFormatError",
    # Utilities
    "wrap_exception",
]
