"""SQLAlchemy backend - transaction handler over an AsyncSession."""

import logging
from typing import Any, Callable, Optional

try:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

    HAS_SQLALCHEMY = True
except ImportError:
    HAS_SQLALCHEMY = False

from ..protocols import TransactionBody, TransactionHandler

logger = logging.getLogger(__name__)


class SQLAlchemyTransactionHandler(TransactionHandler):
    """
    Runs each mediator body in its own session and transaction.

    The session is opened from the factory, the body runs inside
    `session.begin()` (commit on return, rollback on raise), and the
    session is closed afterwards. Dependency bundles are built from the
    session; by default both bundles are the session itself.

    Usage:
        engine = create_async_engine("postgresql+asyncpg://...")
        handler = SQLAlchemyTransactionHandler(
            async_sessionmaker(engine, expire_on_commit=False),
            use_case_deps=lambda session: Repositories(session),
            event_processor_deps=lambda session: Projections(session),
        )
        mediator = Mediator(handler, use_cases, event_processors)
    """

    def __init__(
        self,
        session_factory: "async_sessionmaker[AsyncSession]",
        use_case_deps: Optional[Callable[["AsyncSession"], Any]] = None,
        event_processor_deps: Optional[Callable[["AsyncSession"], Any]] = None,
    ):
        """
        Initialize the transaction handler.

        Args:
            session_factory: Factory creating new AsyncSession instances
            use_case_deps: Builds the use case dependency bundle from the session
            event_processor_deps: Builds the event processor bundle from the session
        """
        if not HAS_SQLALCHEMY:
            raise ImportError(
                "SQLAlchemy is required for SQLAlchemyTransactionHandler. "
                "Install with: pip install dddam[sqlalchemy]"
            )
        if session_factory is None:
            raise ValueError("No session factory provided")

        self._session_factory = session_factory
        self._use_case_deps = use_case_deps
        self._event_processor_deps = event_processor_deps

    async def __call__(self, body: TransactionBody) -> Any:
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    use_case_deps = (
                        self._use_case_deps(session) if self._use_case_deps else session
                    )
                    event_processor_deps = (
                        self._event_processor_deps(session)
                        if self._event_processor_deps
                        else session
                    )
                    return await body(use_case_deps, event_processor_deps)
            except Exception as e:
                logger.debug(f"Transaction rolled back: {e}")
                raise


def create_transaction_handler(
    engine: "AsyncEngine" = None,
    session_factory: "async_sessionmaker[AsyncSession]" = None,
    use_case_deps: Optional[Callable[["AsyncSession"], Any]] = None,
    event_processor_deps: Optional[Callable[["AsyncSession"], Any]] = None,
) -> SQLAlchemyTransactionHandler:
    """
    Create a SQLAlchemyTransactionHandler.

    Args:
        engine: SQLAlchemy async engine (will create session factory)
        session_factory: Pre-configured session factory
        use_case_deps: Builds the use case dependency bundle from the session
        event_processor_deps: Builds the event processor bundle from the session

    Usage:
        handler = create_transaction_handler(engine, use_case_deps=Repositories)
        mediator = Mediator(handler, use_cases, event_processors)
    """
    if not HAS_SQLALCHEMY:
        raise ImportError("SQLAlchemy is required")

    if session_factory is None and engine is not None:
        session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    if session_factory is None:
        raise ValueError("Either engine or session_factory must be provided")

    return SQLAlchemyTransactionHandler(
        session_factory,
        use_case_deps=use_case_deps,
        event_processor_deps=event_processor_deps,
    )
