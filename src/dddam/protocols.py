"""Protocol definitions for the collaborators the mediator consumes.

All protocols use @runtime_checkable for structural typing support.
"""
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Protocol,
    TypeVar,
    runtime_checkable,
    TYPE_CHECKING,
)

if TYPE_CHECKING:
    from .validation import SchemaViolation

TResult = TypeVar("TResult")

# body(use_case_deps, event_processor_deps) -> result
TransactionBody = Callable[[Any, Any], Awaitable[TResult]]


@runtime_checkable
class SchemaEngine(Protocol):
    """
    Validation engine protocol.

    The mediator never interprets schemas itself; it asks an engine
    whether a value satisfies a schema and, if not, why.
    """

    def check(self, schema: Any, value: Any) -> bool:
        """Return True if `value` satisfies `schema`."""
        ...

    def errors(self, schema: Any, value: Any) -> List["SchemaViolation"]:
        """Return the ordered list of violations of `schema` by `value`."""
        ...

    def json_schema(self, schema: Any) -> Dict[str, Any]:
        """Describe `schema` as a JSON Schema document."""
        ...


@runtime_checkable
class TransactionHandler(Protocol):
    """
    Transaction handler protocol.

    Implementations open a transactional scope, build the two dependency
    bundles, await `body(use_case_deps, event_processor_deps)`, commit on
    normal return and roll back when the body raises. The error must be
    re-raised after rollback.
    """

    async def __call__(self, body: TransactionBody) -> Any:
        ...


@runtime_checkable
class UnitOfWork(Protocol):
    """
    Unit of Work protocol for transaction management.

    Implementations should handle transaction lifecycle:
    - Begin transaction on __aenter__
    - Commit on successful __aexit__
    - Rollback on exception in __aexit__
    """

    async def __aenter__(self) -> "UnitOfWork":
        """Start the unit of work scope."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """End the unit of work scope, commit or rollback."""
        ...

    async def commit(self) -> None:
        """Explicitly commit the transaction."""
        ...

    async def rollback(self) -> None:
        """Explicitly rollback the transaction."""
        ...
