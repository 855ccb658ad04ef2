"""Exceptions for the dddam mediator."""
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .validation import SchemaViolation


class DDDamError(Exception):
    """Base exception for all dddam errors."""
    pass


class ValidationError(DDDamError, ValueError):
    """Raised when use case parameters fail schema validation."""

    def __init__(
        self,
        value: Any,
        schema: Any,
        errors: List["SchemaViolation"],
        use_case_name: Optional[str] = None,
    ):
        """
        Initialize validation error.

        Args:
            value: The rejected parameters.
            schema: The schema the parameters were checked against.
            errors: Itemized violations, in the order the engine reported them.
            use_case_name: Name of the use case that rejected the value.
        """
        self.value = value
        self.schema = schema
        self.errors = list(errors)
        self.use_case_name = use_case_name
        target = f" for '{use_case_name}'" if use_case_name else ""
        super().__init__(
            f"Data validation failed{target}: "
            + "; ".join(str(error) for error in self.errors)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "error": "validation_error",
            "use_case": self.use_case_name,
            "errors": [error.to_dict() for error in self.errors],
        }


class UseCaseNotFoundError(DDDamError, LookupError):
    """Raised when no use case is registered under the requested name."""

    def __init__(self, use_case_name: str):
        self.use_case_name = use_case_name
        super().__init__(f"No use case registered as '{use_case_name}'")

    def to_dict(self) -> Dict[str, Any]:
        return {"error": "use_case_not_found", "use_case": self.use_case_name}


class DuplicateUseCaseError(DDDamError, ValueError):
    """Raised at mediator construction when two use cases share a name."""

    def __init__(self, use_case_name: str):
        self.use_case_name = use_case_name
        super().__init__(f"Use case '{use_case_name}' is registered more than once")

    def to_dict(self) -> Dict[str, Any]:
        return {"error": "duplicate_use_case", "use_case": self.use_case_name}


class InvalidEventError(DDDamError, TypeError):
    """Raised when a use case emits something that is not a domain event."""

    def __init__(self, event: Any, reason: str):
        self.event = event
        self.reason = reason
        super().__init__(f"Invalid domain event {event!r}: {reason}")

    def to_dict(self) -> Dict[str, Any]:
        return {"error": "invalid_event", "reason": self.reason}
