"""Application exceptions for the resource advisor."""

from __future__ import annotations


class AdvisorError(Exception):
    """Base exception for resource advisor errors.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(AdvisorError):
    """Raised at startup when configuration is unreadable or invalid.

    Covers unknown strategy or grouping values, unknown keys and malformed
    config files. Always raised before any cluster or metrics call.
    """


class BackendQueryError(AdvisorError):
    """Raised when the metrics backend fails while building a recommendation.

    Attributes:
        purpose: What the failing query was for (e.g. "memory request").
        query: The rendered query expression, if one was issued.
        original_error: The underlying client exception.
    """

    def __init__(
        self,
        purpose: str,
        query: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize BackendQueryError.

        Args:
            purpose: What the failing query was for.
            query: The rendered query expression.
            original_error: The exception raised by the metrics client.
        """
        message = f"error getting {purpose}"
        if original_error is not None:
            message = f"{message}: {original_error}"
        super().__init__(message)
        self.purpose = purpose
        self.query = query
        self.original_error = original_error


class ScoringError(AdvisorError):
    """Raised when the scorer is handed a quantity string it cannot parse."""

    def __init__(self, value: str, original_error: Exception | None = None) -> None:
        super().__init__(f"cannot parse quantity {value!r}")
        self.value = value
        self.original_error = original_error


class FilterExpressionError(AdvisorError):
    """Raised when a row filter expression is malformed or names an unknown field."""


class NoPodsFoundError(AdvisorError):
    """Raised when the workload listing returns no pods."""

    def __init__(self, namespace: str | None = None, label_selector: str | None = None) -> None:
        message = "no pods found"
        if namespace:
            message += f" in namespace '{namespace}'"
        if label_selector:
            message += f" matching '{label_selector}'"
        super().__init__(message)
        self.namespace = namespace
        self.label_selector = label_selector
