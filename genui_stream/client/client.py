"""HTTP client for the streaming endpoints."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Final, Literal

import httpx

from ..consts import SSE_CONTENT_TYPE
from ..render.spec import ParseLimits
from ..request_types import RunRequest
from .accumulator import RunAccumulator
from .conversation import Conversation
from .reader import EventStreamReader

__all__ = ['GenUIClient', 'Endpoint', 'CONNECTION_ERROR']

_LOGGER: logging.Logger = logging.getLogger(__name__)

Endpoint = Literal['agui', 'a2ui']

CONNECTION_ERROR: Final[str] = 'connection_error'
"""Error code of runs that ended because the connection failed."""


class GenUIClient:
    """A client for the generative UI streaming endpoints."""

    def __init__(
        self,
        base_url: str = 'http://localhost:3001',
        http_client: httpx.AsyncClient | None = None,
        *,
        parse_limits: ParseLimits | None = None,
    ) -> None:
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(timeout=httpx.Timeout(10.0, read=None))
        self.http_client = http_client
        self.base_url = base_url.rstrip('/')
        self.parse_limits = parse_limits or ParseLimits()

    async def __aenter__(self) -> GenUIClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client, if it was created by this client."""
        if self._owns_http_client:
            await self.http_client.aclose()

    async def send(
        self,
        conversation: Conversation,
        content: str | None = None,
        *,
        endpoint: Endpoint = 'agui',
        run_id: str | None = None,
    ) -> AsyncIterator[Conversation]:
        """Send the conversation and follow the run.

        The conversation is updated in place and yielded after every event, so a UI can re-render
        progressively. Connection failures end the run with a `connection_error` entry; `loading` is
        always cleared when the iteration ends.

        Args:
            conversation: The conversation to send and update.
            content: A new user message to append before sending.
            endpoint: `agui` for the fixed catalog, `a2ui` for declarative specifications.
            run_id: The run id to request, generated by the server if omitted.

        Yields:
            The conversation, after each update.
        """
        if content is not None:
            conversation.add_user_message(content)
        run_request = RunRequest(messages=conversation.to_messages(), thread_id=conversation.thread_id, run_id=run_id)
        accumulator = RunAccumulator(conversation=conversation, parse_limits=self.parse_limits)
        reader = EventStreamReader()

        conversation.loading = True
        yield conversation
        try:
            async with self.http_client.stream(
                'POST',
                f'{self.base_url}/api/{endpoint}',
                content=run_request.model_dump_json(by_alias=True, exclude_none=True),
                headers={'Content-Type': 'application/json', 'Accept': SSE_CONTENT_TYPE},
            ) as response:
                response.raise_for_status()
                async for event in reader.aiter_events(response.aiter_bytes()):
                    accumulator.apply(event)
                    yield conversation

            if not accumulator.finished:
                _LOGGER.warning('stream closed before the run finished')
                accumulator.fail('the stream ended before the run finished', CONNECTION_ERROR)
                yield conversation
        except httpx.HTTPError as e:
            _LOGGER.warning('request to %s failed: %s', endpoint, e)
            accumulator.fail(str(e) or type(e).__name__, CONNECTION_ERROR)
            yield conversation
        finally:
            conversation.loading = False
