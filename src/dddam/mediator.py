import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Tuple

from .events import EventCollector, EventProcessor, get_event_name
from .exceptions import DuplicateUseCaseError, UseCaseNotFoundError, ValidationError
from .protocols import TransactionHandler
from .use_case import UseCase

logger = logging.getLogger("dddam")


class Mediator:
    """
    Application layer Mediator.

    Runs use cases (commands or queries) inside a transaction supplied by
    the host, then hands the domain events they raised to the registered
    event processors in the same transaction:

    1. Look up the use case by name.
    2. Open a transaction through the transaction handler.
    3. Validate the params and execute the use case, collecting its events.
    4. Dispatch each event, in emission order, to its processors in
       registration order.
    5. Return the result once the transaction handler commits.

    Any error raised in steps 3-4 unwinds the transaction, so a use case and
    all of its event processors commit together or not at all.

    Using two instances, one for commands and one for queries, keeps the
    dependencies of each side separate.

    Usage:
        mediator = Mediator(
            transaction_handler,
            [create_user_use_case, delete_user_use_case],
            [count_users_processor],
        )
        result = await mediator.run("create user", {"username": "albo"})
    """

    def __init__(
        self,
        transaction_handler: TransactionHandler,
        use_cases: Iterable[UseCase],
        event_processors: Iterable[EventProcessor] = (),
    ):
        """
        Initialize the mediator.

        Args:
            transaction_handler: Async callable opening the transactional scope
            use_cases: Use cases to register; names must be unique
            event_processors: Event processors, invoked in this order per event

        Raises:
            DuplicateUseCaseError: two use cases share a name
        """
        self._transaction_handler = transaction_handler
        self._use_cases = self._create_use_cases_map(use_cases)
        self._event_processors = self._create_event_processors_map(event_processors)

        logger.debug(
            f"Mediator: registered {len(self._use_cases)} use cases, "
            f"processors for {len(self._event_processors)} events"
        )

    @staticmethod
    def _create_use_cases_map(use_cases: Iterable[UseCase]) -> Dict[str, UseCase]:
        use_cases_map: Dict[str, UseCase] = {}
        for use_case in use_cases:
            if use_case.name in use_cases_map:
                raise DuplicateUseCaseError(use_case.name)
            use_cases_map[use_case.name] = use_case
        return use_cases_map

    @staticmethod
    def _create_event_processors_map(
        event_processors: Iterable[EventProcessor],
    ) -> Dict[str, Tuple[EventProcessor, ...]]:
        grouped: Dict[str, List[EventProcessor]] = {}
        for processor in event_processors:
            grouped.setdefault(processor.event_name, []).append(processor)
        return {name: tuple(processors) for name, processors in grouped.items()}

    # --- Introspection ---

    @property
    def use_case_names(self) -> Tuple[str, ...]:
        return tuple(self._use_cases)

    @property
    def event_names(self) -> Tuple[str, ...]:
        return tuple(self._event_processors)

    def processors_for(self, event_name: str) -> Tuple[EventProcessor, ...]:
        """Processors registered for an event name, in invocation order."""
        return self._event_processors.get(event_name, ())

    def __contains__(self, use_case_name: object) -> bool:
        return use_case_name in self._use_cases

    def describe(self) -> Dict[str, Any]:
        """Plain-data summary of both registries."""
        return {
            "use_cases": list(self._use_cases),
            "event_processors": {
                name: len(processors)
                for name, processors in self._event_processors.items()
            },
        }

    def _get_use_case(self, use_case_name: str) -> UseCase:
        use_case = self._use_cases.get(use_case_name)
        if use_case is None:
            raise UseCaseNotFoundError(use_case_name)
        return use_case

    def get_schema(self, use_case_name: str) -> Any:
        """
        Get the params schema of a registered use case.

        Useful for API layers that expose or pre-validate shapes.
        """
        return self._get_use_case(use_case_name).params_schema

    def get_json_schema(self, use_case_name: str) -> Dict[str, Any]:
        """Params schema of a use case rendered as JSON Schema by its engine."""
        use_case = self._get_use_case(use_case_name)
        return use_case.schema_engine.json_schema(use_case.params_schema)

    # --- Execution ---

    async def run(self, use_case_name: str, params: Any) -> Any:
        """
        Run a use case in a transaction and return its result.

        The transaction is rolled back if the use case or any event processor
        raises; the error is re-raised unchanged.

        Raises:
            UseCaseNotFoundError: no use case with this name (the transaction
                handler is not called)
            ValidationError: params do not satisfy the use case schema
        """
        use_case = self._get_use_case(use_case_name)

        async def transaction(use_case_deps: Any, event_processor_deps: Any) -> Any:
            collector = EventCollector()
            result = await use_case.execute(params, use_case_deps, collector)
            for event in collector:
                await self._process_event(event, event_processor_deps)
            return result

        logger.info(f"Executing {use_case_name}")
        start_time = datetime.now()
        try:
            result = await self._transaction_handler(transaction)
        except ValidationError:
            raise
        except Exception as e:
            logger.error(f"Failed {use_case_name}: {e}")
            raise
        duration = datetime.now() - start_time
        logger.info(f"Completed {use_case_name} in {duration.total_seconds():.3f}s")
        return result

    async def _process_event(self, event: Any, event_processor_deps: Any) -> None:
        event_name = get_event_name(event)
        processors = self._event_processors.get(event_name, ())
        if not processors:
            logger.debug(f"No event processors for {event_name}")
            return

        for processor in processors:
            logger.debug(f"Dispatching {event_name} to {processor!r}")
            try:
                await processor.process(event, event_processor_deps)
            except Exception as e:
                logger.error(
                    f"Event processor {processor!r} failed for {event_name}: {e}",
                    exc_info=True,
                )
                raise

    def __repr__(self) -> str:
        return f"Mediator(use_cases={list(self._use_cases)!r})"
