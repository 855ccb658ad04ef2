"""
# dddam

An application layer Mediator for CQRS and DDD applications.

## Core Components

- `UseCase` - A named command or query with a validated params schema
- `EventProcessor` - Reacts to one kind of domain event
- `Event` - Optional dataclass base for domain events
- `Mediator` - Runs use cases in a transaction and dispatches their events

### Validation
- `PydanticSchemaEngine` - Schemas as pydantic models / types (default)
- `JSONSchemaEngine` - Schemas as JSON Schema documents (`jsonschema`)

### Transactions
- `StaticTransactionHandler` - Fixed dependencies, no transaction
- `UnitOfWorkTransactionHandler` - One UnitOfWork per run
- `backends.sqlalchemy` - One AsyncSession transaction per run

### Framework Integrations
- `contrib.fastapi` - Expose use cases as FastAPI endpoints
"""

from .events import (
    DomainEvent,
    Event,
    EventCollector,
    EventProcessor,
    get_event_name,
)
from .exceptions import (
    DDDamError,
    ValidationError,
    UseCaseNotFoundError,
    DuplicateUseCaseError,
    InvalidEventError,
)
from .mediator import Mediator
from .protocols import SchemaEngine, TransactionHandler, UnitOfWork
from .transactions import StaticTransactionHandler, UnitOfWorkTransactionHandler
from .use_case import UseCase
from .validation import (
    SchemaViolation,
    PydanticSchemaEngine,
    JSONSchemaEngine,
    resolve_schema_engine,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "UseCase",
    "Mediator",
    # Events
    "DomainEvent",
    "Event",
    "EventCollector",
    "EventProcessor",
    "get_event_name",
    # Errors
    "DDDamError",
    "ValidationError",
    "UseCaseNotFoundError",
    "DuplicateUseCaseError",
    "InvalidEventError",
    # Protocols
    "SchemaEngine",
    "TransactionHandler",
    "UnitOfWork",
    # Transactions
    "StaticTransactionHandler",
    "UnitOfWorkTransactionHandler",
    # Validation
    "SchemaViolation",
    "PydanticSchemaEngine",
    "JSONSchemaEngine",
    "resolve_schema_engine",
]
