"""Tests for the ASGI application, driven through the client."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import pytest
from asgi_lifespan import LifespanManager
from dirty_equals import IsStr
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart, ToolCallPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pytest_mock import MockerFixture

from genui_stream.app import GenUIApp
from genui_stream.catalog import RENDER_CUSTOM_UI, ToolName
from genui_stream.client import (
    CONNECTION_ERROR,
    AssistantTextEntry,
    Conversation,
    ErrorEntry,
    GenUIClient,
    ToolCallEntry,
    UISpecEntry,
    UserEntry,
)
from genui_stream.consts import FALLBACK_TEXT, SSE_CONTENT_TYPE
from genui_stream.encoder import encode_event
from genui_stream.events import RunStartedEvent
from genui_stream.prompts import AGUI_SYSTEM_PROMPT
from genui_stream.render import render_conversation

from .conftest import IdFactory
from .test_session import WEATHER_ARGS, weather_deltas

pytestmark = [pytest.mark.anyio]

BASE_URL = 'http://testserver'


@asynccontextmanager
async def serve(app: GenUIApp) -> AsyncIterator[httpx.AsyncClient]:
    async with LifespanManager(app):
        transport = httpx.ASGITransport(app)
        async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
            yield client


async def follow(client: GenUIClient, conversation: Conversation, content: str, **kwargs: str) -> list[bool]:
    """Run one turn, returning the `loading` flag seen at each update."""
    return [update.loading async for update in client.send(conversation, content, **kwargs)]  # type: ignore[arg-type]


def text_model() -> FunctionModel:
    def function(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        return ModelResponse(parts=[TextPart('ok')])

    return FunctionModel(function)


async def test_health():
    async with serve(GenUIApp(model=text_model())) as client:
        response = await client.get('/api/health')

    assert response.status_code == 200
    assert response.json() == {'status': 'ok'}


async def test_sse_response_headers():
    async with serve(GenUIApp(model=text_model())) as client:
        response = await client.post(
            '/api/agui',
            content='{"messages": [{"role": "user", "content": "hi"}]}',
            headers={'Content-Type': 'application/json', 'Accept': SSE_CONTENT_TYPE},
        )

    assert response.status_code == 200
    assert response.headers['content-type'].startswith(SSE_CONTENT_TYPE)
    assert response.headers['cache-control'] == 'no-cache'
    assert response.headers['x-accel-buffering'] == 'no'
    assert response.text.startswith('data: {"type":"run.started"')
    assert response.text.endswith('\n\n')


@pytest.mark.parametrize('path', ['/api/agui', '/api/a2ui'])
@pytest.mark.parametrize(
    'body',
    [
        pytest.param('{"messages": "nope"}', id='wrong-type'),
        pytest.param('{"messages": [{"role": "robot", "content": "hi"}]}', id='unknown-role'),
        pytest.param('{"threadId": "t"}', id='missing-messages'),
        pytest.param('not json', id='invalid-json'),
    ],
)
async def test_invalid_request_body(path: str, body: str):
    async with serve(GenUIApp(model=text_model())) as client:
        response = await client.post(path, content=body, headers={'Content-Type': 'application/json'})

    assert response.status_code == 422
    assert response.headers['content-type'] == 'application/json'
    assert isinstance(response.json(), list)


async def test_cors_preflight():
    async with serve(GenUIApp(model=text_model())) as client:
        response = await client.options(
            '/api/agui',
            headers={'Origin': 'http://localhost:5173', 'Access-Control-Request-Method': 'POST'},
        )

    assert response.status_code == 200
    assert response.headers['access-control-allow-origin'] == '*'


async def test_streamed_tool_call_end_to_end(new_id: IdFactory):
    app = GenUIApp(model=FunctionModel(stream_function=weather_deltas), stream=True, new_id=new_id)
    conversation = Conversation()

    async with serve(app) as http_client:
        client = GenUIClient(BASE_URL, http_client)
        loading = await follow(client, conversation, 'Weather in Paris?')

    assert loading[0] is True
    assert conversation.loading is False
    assert conversation.thread_id == 'id-1'
    assert conversation.entries == [
        UserEntry('Weather in Paris?'),
        AssistantTextEntry('id-3', FALLBACK_TEXT, True),
        ToolCallEntry('id-4', ToolName.WEATHER_CARD.value, WEATHER_ARGS, 'id-3'),
    ]
    html = str(render_conversation(conversation))
    assert '<div class="genui-weather"><h3>Paris</h3>' in html
    assert 'genui-loading' not in html


async def test_second_turn_drops_ui_artifacts(new_id: IdFactory):
    seen: list[list[ModelMessage]] = []

    def function(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        seen.append(messages)
        if len(seen) == 1:
            return ModelResponse(parts=[ToolCallPart(ToolName.WEATHER_CARD.value, WEATHER_ARGS)])
        return ModelResponse(parts=[TextPart('Tomorrow looks cloudy.')])

    conversation = Conversation()
    async with serve(GenUIApp(model=FunctionModel(function), new_id=new_id)) as http_client:
        client = GenUIClient(BASE_URL, http_client)
        await follow(client, conversation, 'Weather in Paris?')
        await follow(client, conversation, 'And tomorrow?')

    contents = [part.content for message in seen[1] for part in message.parts]  # type: ignore[union-attr]
    assert contents == [AGUI_SYSTEM_PROMPT, 'Weather in Paris?', FALLBACK_TEXT, 'And tomorrow?']
    assert conversation.thread_id == 'id-1'
    assert isinstance(conversation.entries[-1], AssistantTextEntry)
    assert conversation.entries[-1].content == 'Tomorrow looks cloudy.'


async def test_a2ui_end_to_end(new_id: IdFactory):
    def function(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        specification = {'component': 'card', 'children': [{'component': 'heading', 'props': {'text': 'Sales'}}]}
        return ModelResponse(
            parts=[TextPart('Here:'), ToolCallPart(RENDER_CUSTOM_UI, {'specification': specification})]
        )

    conversation = Conversation()
    async with serve(GenUIApp(model=FunctionModel(function), new_id=new_id)) as http_client:
        client = GenUIClient(BASE_URL, http_client)
        await follow(client, conversation, 'Build a sales card', endpoint='a2ui')

    assert conversation.entries[:2] == [UserEntry('Build a sales card'), AssistantTextEntry('id-3', 'Here:', True)]
    entry = conversation.entries[2]
    assert isinstance(entry, UISpecEntry)
    assert entry.spec_id == 'id-4'
    assert entry.parent_message_id == 'id-3'
    assert entry.specification['version'] == '1.0'
    assert '<div class="genui-card"><h2 class="genui-heading">Sales</h2></div>' in str(render_conversation(conversation))


def nested_specification(depth: int) -> dict[str, Any]:
    specification: dict[str, Any] = {'component': 'text', 'props': {'content': 'bottom'}}
    for _ in range(depth - 1):
        specification = {'component': 'container', 'children': [specification]}
    return specification


async def a2ui_turn(app: GenUIApp, content: str) -> Conversation:
    conversation = Conversation()
    async with serve(app) as http_client:
        client = GenUIClient(BASE_URL, http_client)
        await follow(client, conversation, content, endpoint='a2ui')
    return conversation


def assert_truncated_spec(conversation: Conversation) -> None:
    assert conversation.entries[0] == UserEntry('Nest it')
    assert not any(isinstance(entry, ErrorEntry) for entry in conversation.entries)
    entry = conversation.entries[-1]
    assert isinstance(entry, UISpecEntry)
    assert 'Content truncated: nesting deeper than 12 levels' in str(render_conversation(conversation))


async def test_a2ui_nested_specification_is_truncated(new_id: IdFactory):
    specification = nested_specification(110)

    def function(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        return ModelResponse(parts=[ToolCallPart(RENDER_CUSTOM_UI, {'specification': specification})])

    assert_truncated_spec(await a2ui_turn(GenUIApp(model=FunctionModel(function), new_id=new_id), 'Nest it'))


async def test_a2ui_very_deep_specification_is_truncated(new_id: IdFactory, mocker: MockerFixture):
    response = ModelResponse(parts=[ToolCallPart(RENDER_CUSTOM_UI, {'specification': nested_specification(1000)})])
    mocker.patch('genui_stream.session.model_request', return_value=response)

    assert_truncated_spec(await a2ui_turn(GenUIApp(model=text_model(), new_id=new_id), 'Nest it'))


async def test_response_is_sse_whatever_the_accept_header():
    async with serve(GenUIApp(model=text_model())) as client:
        response = await client.post(
            '/api/agui',
            content='{"messages": [{"role": "user", "content": "hi"}]}',
            headers={'Content-Type': 'application/json', 'Accept': 'application/json'},
        )

    assert response.status_code == 200
    assert response.headers['content-type'].startswith(SSE_CONTENT_TYPE)
    assert response.text.startswith('data: ')


async def test_provider_error_end_to_end():
    def function(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        raise ModelHTTPError(status_code=503, model_name='test', body='unavailable')

    conversation = Conversation()
    async with serve(GenUIApp(model=FunctionModel(function))) as http_client:
        client = GenUIClient(BASE_URL, http_client)
        await follow(client, conversation, 'hi')

    assert conversation.entries[-1] == ErrorEntry(IsStr(), 'provider_error')
    assert conversation.loading is False


def mock_client(transport: httpx.MockTransport) -> GenUIClient:
    return GenUIClient(BASE_URL, httpx.AsyncClient(transport=transport))


async def test_http_error_status():
    client = mock_client(httpx.MockTransport(lambda request: httpx.Response(500, text='boom')))
    conversation = Conversation()

    async with client:
        loading = await follow(client, conversation, 'hi')

    assert loading == [True, False]
    assert conversation.entries[0] == UserEntry('hi')
    error = conversation.entries[1]
    assert isinstance(error, ErrorEntry)
    assert error.code == CONNECTION_ERROR
    assert '500' in error.message
    assert conversation.loading is False


async def test_stream_ends_before_run_finished():
    body = encode_event(RunStartedEvent(thread_id='t', run_id='r'))
    client = mock_client(
        httpx.MockTransport(
            lambda request: httpx.Response(200, content=body.encode(), headers={'Content-Type': SSE_CONTENT_TYPE})
        )
    )
    conversation = Conversation()

    async with client:
        await follow(client, conversation, 'hi')

    assert conversation.entries == [
        UserEntry('hi'),
        ErrorEntry('the stream ended before the run finished', CONNECTION_ERROR),
    ]
    assert conversation.thread_id == 't'
    assert conversation.loading is False


async def test_connection_refused():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('connection refused', request=request)

    client = mock_client(httpx.MockTransport(handler))
    conversation = Conversation()

    async with client:
        await follow(client, conversation, 'hi')

    assert conversation.entries[-1] == ErrorEntry('connection refused', CONNECTION_ERROR)


async def test_request_body():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b'', headers={'Content-Type': SSE_CONTENT_TYPE})

    client = mock_client(httpx.MockTransport(handler))
    conversation = Conversation(thread_id='thread-1')
    conversation.entries.append(AssistantTextEntry('m', 'Earlier answer', True))

    async with client:
        await follow(client, conversation, 'hi', endpoint='a2ui', run_id='run-1')

    (request,) = seen
    assert request.url == f'{BASE_URL}/api/a2ui'
    assert request.headers['accept'] == SSE_CONTENT_TYPE
    assert request.read() == (
        b'{"messages":[{"role":"assistant","content":"Earlier answer"},{"role":"user","content":"hi"}],'
        b'"threadId":"thread-1","runId":"run-1"}'
    )
