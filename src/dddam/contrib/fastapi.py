"""FastAPI integration for the dddam Mediator."""

from typing import Any, Callable, Optional

try:
    from fastapi import APIRouter, Body, Depends, Request  # type: ignore
    from fastapi.responses import JSONResponse  # type: ignore

    HAS_FASTAPI = True
except ImportError:
    HAS_FASTAPI = False

from ..exceptions import (
    InvalidEventError,
    UseCaseNotFoundError,
    ValidationError,
)
from ..mediator import Mediator


# =============================================================================
# Use Case Router
# =============================================================================


class UseCaseRouter:
    """
    Router that exposes Mediator use cases as POST endpoints.

    The JSON request body is passed to `mediator.run` as the use case
    params; validation stays with the use case. FastAPI parses the body,
    so malformed JSON is answered with 422 before the mediator runs. The
    OpenAPI request body is documented from the use case's params schema.

    Usage:
        router = UseCaseRouter(mediator=commands, prefix="/api/v1", tags=["Users"])
        router.use_case("/users", "create user", status_code=201)

        app.include_router(router.router)
        register_exception_handlers(app)
    """

    def __init__(
        self,
        mediator: Optional[Mediator] = None,
        mediator_provider: Optional[Callable[[], Mediator]] = None,
        prefix: str = "",
        tags: Optional[list[str]] = None,
        **kwargs: Any,
    ):
        if not HAS_FASTAPI:
            raise ImportError(
                "FastAPI is required. Install with: pip install dddam[fastapi]"
            )

        self.router = APIRouter(prefix=prefix, tags=tags or [], **kwargs)
        self._mediator = mediator

        if mediator_provider:
            self._mediator_dep = mediator_provider
        elif mediator is not None:
            self._mediator_dep = lambda: mediator
        else:
            raise ValueError(
                "UseCaseRouter requires either 'mediator' or 'mediator_provider'"
            )

    def _openapi_extra(self, use_case_name: str) -> Optional[dict]:
        # Only a concrete mediator can be asked for the schema at registration time
        if self._mediator is None:
            return None
        return {
            "requestBody": {
                "required": True,
                "content": {
                    "application/json": {
                        "schema": self._mediator.get_json_schema(use_case_name)
                    }
                },
            }
        }

    def use_case(
        self,
        path: str,
        use_case_name: str,
        status_code: int = 200,
        response_model: Optional[type] = None,
        tags: Optional[list[str]] = None,
        response_mapper: Optional[Callable[[Any], Any]] = None,
        **kwargs: Any,
    ):
        """Register a POST endpoint running `use_case_name`."""

        @self.router.post(
            path,
            response_model=response_model,
            status_code=status_code,
            tags=tags,
            openapi_extra=self._openapi_extra(use_case_name),
            **kwargs,
        )
        async def use_case_endpoint(
            params: Any = Body(default=None),
            mediator: Mediator = Depends(self._mediator_dep),
        ):
            # an empty body runs the use case with empty params
            if params is None:
                params = {}
            result = await mediator.run(use_case_name, params)
            if response_mapper:
                return response_mapper(result)
            return result

        return use_case_endpoint


# =============================================================================
# Exception Handlers
# =============================================================================


def register_exception_handlers(app: Any) -> None:
    """
    Register dddam exception handlers with a FastAPI app.

    Usage:
        from dddam.contrib.fastapi import register_exception_handlers
        register_exception_handlers(app)
    """
    if not HAS_FASTAPI:
        return

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.to_dict()})

    @app.exception_handler(UseCaseNotFoundError)
    async def use_case_not_found_handler(
        request: Request, exc: UseCaseNotFoundError
    ) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidEventError)
    async def invalid_event_handler(
        request: Request, exc: InvalidEventError
    ) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": exc.to_dict()})
