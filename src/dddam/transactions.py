"""Ready-made transaction handlers for the Mediator."""

from typing import Any, Callable, Optional

from .protocols import TransactionBody, TransactionHandler, UnitOfWork


class StaticTransactionHandler(TransactionHandler):
    """
    Passes the same dependency bundles to every run, without a transaction.

    Suited for tests and for read-only (query) mediators.

    Usage:
        handler = StaticTransactionHandler({"user_repo": repo}, {"mailer": mailer})
        mediator = Mediator(handler, use_cases, event_processors)
    """

    def __init__(self, use_case_deps: Any = None, event_processor_deps: Any = None):
        self.use_case_deps = use_case_deps
        self.event_processor_deps = event_processor_deps

    async def __call__(self, body: TransactionBody) -> Any:
        return await body(self.use_case_deps, self.event_processor_deps)


class UnitOfWorkTransactionHandler(TransactionHandler):
    """
    Runs each body inside a fresh UnitOfWork.

    The unit of work commits when the body returns and rolls back when it
    raises. Both dependency bundles are built from the open unit of work;
    by default each bundle is the unit of work itself.

    Usage:
        handler = UnitOfWorkTransactionHandler(
            uow_factory=lambda: SQLAlchemyUnitOfWork(session_factory),
            use_case_deps=lambda uow: Repositories(uow.session),
            event_processor_deps=lambda uow: Projections(uow.session),
        )
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        use_case_deps: Optional[Callable[[UnitOfWork], Any]] = None,
        event_processor_deps: Optional[Callable[[UnitOfWork], Any]] = None,
    ):
        self._uow_factory = uow_factory
        self._use_case_deps = use_case_deps
        self._event_processor_deps = event_processor_deps

    async def __call__(self, body: TransactionBody) -> Any:
        async with self._uow_factory() as uow:
            use_case_deps = self._use_case_deps(uow) if self._use_case_deps else uow
            event_processor_deps = (
                self._event_processor_deps(uow) if self._event_processor_deps else uow
            )
            return await body(use_case_deps, event_processor_deps)
