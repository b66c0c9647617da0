"""Domain error classes.

Protocol-agnostic errors that represent catalog failures.
The HTTP entrypoint translates them to responses; the client stores
translate them to human-readable error strings.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain errors.

    Carries a message plus arbitrary context that protocol adapters
    can render (HTTP JSON body, store error field, log extras).
    """

    # Default error code (can be used as i18n key)
    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        """Create a domain error.

        Args:
            message: Human-readable error message
            **context: Additional context for error (e.g., field names, values)
        """
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to structured format for protocol translation."""
        return {
            "message": self.message,
            "code": self.error_code,
            **self.context,
        }


class ValidationError(DomainError):
    """Business rule validation error.

    Used for filter bounds, inverted ranges and paging constraints.

    Examples:
        - priceMin > priceMax
        - rooms outside the available set
        - limit > 100

    Protocol mappings:
        - REST: 422 Unprocessable Entity
        - Client stores: human-readable ``error`` field
    """

    error_code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, str]] | None = None,
        **context: Any,
    ) -> None:
        """Create a validation error.

        Args:
            message: Overall validation error message (optional if errors provided)
            errors: List of field-specific errors, each with 'field' and 'message'
                   Example: [{"field": "priceRange", "message": "...", "code": "PRICE_RANGE_INVALID"}]
            **context: Additional context
        """
        self.errors: list[dict[str, str]] | None
        if errors:
            self.errors = errors
            msg = message or "Validation failed"
        else:
            self.errors = None
            msg = message or "Validation error"

        super().__init__(msg, **context)

    def to_dict(self) -> dict[str, Any]:
        """Convert to structured format."""
        if self.errors:
            return {
                "message": self.message,
                "code": self.error_code,
                "errors": self.errors,
                **self.context,
            }
        return super().to_dict()


class FilterValidationError(ValidationError):
    """Raised when filter parameters are invalid."""

    pass


class PagingValidationError(ValidationError):
    """Raised when paging parameters are invalid."""

    pass


class NotFoundError(DomainError):
    """Resource not found.

    Protocol mappings:
        - REST: 404 Not Found
    """

    error_code: str = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str | None = None, **context: Any) -> None:
        """Create a not found error.

        Args:
            resource: Type of resource (e.g., "Apartment")
            identifier: Resource identifier
            **context: Additional context
        """
        if identifier:
            message = f"{resource} with identifier '{identifier}' not found"
        else:
            message = f"{resource} not found"

        super().__init__(message, resource=resource, identifier=identifier, **context)


class InternalError(DomainError):
    """Internal error (unexpected conditions, e.g. an unreadable dataset).

    Should be logged for investigation.

    Protocol mappings:
        - REST: 500 Internal Server Error
    """

    error_code: str = "INTERNAL_ERROR"


class ApiRequestError(DomainError):
    """The listing API could not be reached or answered with an error status.

    ``status_code`` is None for transport failures (timeouts, refused
    connections) and the HTTP status for server-side failures.

    Protocol mappings:
        - Client stores: ``error`` field plus retry affordance
    """

    error_code: str = "NETWORK_ERROR"

    def __init__(self, message: str, status_code: int | None = None, **context: Any) -> None:
        super().__init__(message, status_code=status_code, **context)
        self.status_code = status_code
        if status_code is not None:
            self.error_code = "SERVER_ERROR"
