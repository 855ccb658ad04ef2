"""Use cases - named units of business logic that validate their own input."""

import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar, Union

from .exceptions import ValidationError
from .protocols import SchemaEngine
from .validation import SchemaViolation, resolve_schema_engine

logger = logging.getLogger(__name__)

TResult = TypeVar("TResult")
T_Deps = TypeVar("T_Deps")

EmitFunc = Callable[[List[Any]], None]
UseCaseFunc = Callable[
    [Any, T_Deps, str, EmitFunc], Union[Awaitable[TResult], TResult]
]


class UseCase(Generic[T_Deps, TResult]):
    """
    A Command or a Query of CQRS.

    Binds a name, a params schema and a handler. The handler is called as
    `handler(params, deps, use_case_name, emit)` and may raise domain
    events by calling `emit([...])` any number of times.

    Usage:
        class CreateUserParams(BaseModel):
            username: str
            password: str

        async def create_user(params, deps, use_case_name, emit):
            deps.user_repo.add(User(params["username"]))
            emit([UserAdded(params["username"])])

        create_user_use_case = UseCase("create user", CreateUserParams, create_user)
    """

    def __init__(
        self,
        name: str,
        params_schema: Any,
        handler: UseCaseFunc,
        schema_engine: Optional[SchemaEngine] = None,
    ):
        """
        Initialize the use case.

        Args:
            name: Unique name of the use case inside a Mediator.
            params_schema: Schema of the parameters, interpreted by the engine.
            handler: Sync or async function implementing the use case.
            schema_engine: Validation engine. Picked from the schema type if omitted.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Use case name must be a non-empty string")
        if not callable(handler):
            raise TypeError(f"Handler of use case '{name}' is not callable")

        self._name = name
        self._params_schema = params_schema
        self._handler = handler
        self._schema_engine = schema_engine or resolve_schema_engine(params_schema)

    @property
    def name(self) -> str:
        return self._name

    @property
    def params_schema(self) -> Any:
        return self._params_schema

    @property
    def handler(self) -> UseCaseFunc:
        return self._handler

    @property
    def schema_engine(self) -> SchemaEngine:
        return self._schema_engine

    def validate(self, params: Any) -> List[SchemaViolation]:
        """
        Return the violations of the params schema (empty when valid).

        A single `errors` pass both decides validity and describes it.
        """
        return list(self._schema_engine.errors(self._params_schema, params))

    async def execute(self, params: Any, deps: T_Deps, emit: EmitFunc) -> TResult:
        """
        Validate `params` and run the handler.

        Raises:
            ValidationError: params do not satisfy the schema. The handler is
                not called.
        """
        errors = self.validate(params)
        if errors:
            logger.warning(
                f"Validation failed for {self._name}: "
                + "; ".join(str(error) for error in errors)
            )
            raise ValidationError(params, self._params_schema, errors, self._name)

        result = self._handler(params, deps, self._name, emit)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"UseCase({self._name!r})"
