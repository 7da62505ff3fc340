"""ASGI application serving the generative UI endpoints."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from http import HTTPStatus
from typing import Any

from pydantic import ValidationError
from pydantic_ai import models
from pydantic_ai.settings import ModelSettings
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse
from starlette.types import ExceptionHandler, Lifespan

from .consts import SSE_CONTENT_TYPE, SSE_HEADERS
from .request_types import run_request_ta
from .session import A2UISession, AGUISession, StreamSession, random_id
from .settings import DEFAULT_MODEL, Settings, load_settings

__all__ = ['GenUIApp', 'create_app']

_LOGGER: logging.Logger = logging.getLogger(__name__)


class GenUIApp(Starlette):
    """ASGI application serving both generative UI endpoints.

    Routes:
        `POST /api/agui`: fixed-catalog stream.
        `POST /api/a2ui`: declarative specification stream.
        `GET /api/health`: liveness check.
    """

    def __init__(
        self,
        *,
        model: models.Model | models.KnownModelName | str = DEFAULT_MODEL,
        model_settings: ModelSettings | None = None,
        stream: bool = False,
        new_id: Callable[[], str] = random_id,
        cors_origins: Sequence[str] = ('*',),
        # Starlette parameters.
        debug: bool = False,
        middleware: Sequence[Middleware] | None = None,
        exception_handlers: Mapping[Any, ExceptionHandler] | None = None,
        lifespan: Lifespan[GenUIApp] | None = None,
    ) -> None:
        """Create the application.

        Args:
            model: The model to request for every run.
            model_settings: Optional settings for every model request.
            stream: Forward model deltas as they arrive on `/api/agui`.
            new_id: Factory for the ids generated by the sessions.
            cors_origins: Origins allowed to call the API.

            debug: Boolean indicating if debug tracebacks should be returned on errors.
            middleware: Extra middleware, run inside the CORS middleware.
            exception_handlers: A mapping of status codes or exception classes onto handlers.
            lifespan: A lifespan context function for startup and shutdown tasks.
        """
        super().__init__(
            debug=debug,
            middleware=[
                Middleware(
                    CORSMiddleware,
                    allow_origins=list(cors_origins),
                    allow_methods=['GET', 'POST', 'OPTIONS'],
                    allow_headers=['*'],
                ),
                *(middleware or ()),
            ],
            exception_handlers=exception_handlers,
            lifespan=lifespan,
        )
        self.model = model
        self.model_settings = model_settings
        self.stream = stream
        self.new_id = new_id

        self.router.add_route('/api/agui', self.agui_endpoint, methods=['POST'], name='agui')
        self.router.add_route('/api/a2ui', self.a2ui_endpoint, methods=['POST'], name='a2ui')
        self.router.add_route('/api/health', self.health_endpoint, methods=['GET'], name='health')

    async def agui_endpoint(self, request: Request) -> Response:
        """Stream a fixed-catalog run."""
        return await self.dispatch_request(request, AGUISession, stream=self.stream)

    async def a2ui_endpoint(self, request: Request) -> Response:
        """Stream a declarative specification run."""
        return await self.dispatch_request(request, A2UISession)

    async def health_endpoint(self, request: Request) -> Response:
        return JSONResponse({'status': 'ok'})

    async def dispatch_request(self, request: Request, session_type: type[StreamSession], **kwargs: Any) -> Response:
        """Validate the request body and stream the session's events.

        Returns:
            A streaming SSE response, or a 422 response with the validation errors.
        """
        try:
            run_request = run_request_ta.validate_json(await request.body())
        except ValidationError as e:
            _LOGGER.info('invalid request to %s: %d errors', request.url.path, e.error_count())
            return Response(
                content=e.json(),
                media_type='application/json',
                status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            )

        session = session_type(
            run_request=run_request,
            model=self.model,
            model_settings=self.model_settings,
            new_id=self.new_id,
            **kwargs,
        )
        return StreamingResponse(session.encode_stream(), media_type=SSE_CONTENT_TYPE, headers=SSE_HEADERS)


def create_app(settings: Settings | None = None) -> GenUIApp:
    """Create the application from settings, read from the environment by default."""
    settings = settings or load_settings()
    return GenUIApp(model=settings.model, stream=settings.stream, cors_origins=settings.cors_origins)
