"""Server side of the generative UI stream.

A session drives a single model request for one run and turns the response into the event
vocabulary of `genui_stream.events`. Sessions are created per request and share no state.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, cast

import pydantic_core
from pydantic_ai import models
from pydantic_ai.direct import model_request, model_request_stream
from pydantic_ai.exceptions import AgentRunError
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    PartDeltaEvent,
    PartStartEvent,
    SystemPromptPart,
    TextPart,
    TextPartDelta,
    ToolCallPart,
    ToolCallPartDelta,
    UserPromptPart,
)
from pydantic_ai.models import ModelRequestParameters
from pydantic_ai.settings import ModelSettings
from pydantic_ai.tools import ToolDefinition

from ._enums import Role
from ._exceptions import InvalidSpecificationError, NoMessagesError, ProviderError, RunError
from .catalog import RENDER_CUSTOM_UI, catalog_tool_definitions, custom_ui_tool_definition
from .consts import FALLBACK_TEXT, SPEC_VERSION
from .encoder import EventEncoder
from .events import (
    BaseEvent,
    RunErrorEvent,
    RunFinishedEvent,
    RunStartedEvent,
    TextMessageContentEvent,
    TextMessageEndEvent,
    TextMessageStartEvent,
    ToolCallArgsEvent,
    ToolCallEndEvent,
    ToolCallStartEvent,
    UISpecEvent,
)
from .prompts import A2UI_SYSTEM_PROMPT, AGUI_SYSTEM_PROMPT
from .render.spec import prune_specification
from .request_types import ChatMessage, RunRequest

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

__all__ = ['StreamSession', 'AGUISession', 'A2UISession', 'random_id']

_LOGGER: logging.Logger = logging.getLogger(__name__)


def random_id() -> str:
    """Default id factory, a random UUID4."""
    return str(uuid.uuid4())


@dataclass(kw_only=True, repr=False)
class StreamSession(ABC):
    """Base class of the streaming sessions.

    A session always starts with `run.started` and ends with exactly one of `run.finished` or
    `run.error`. Subclasses only produce the events in between.

    Args:
        run_request: The validated request body.
        model: The model to request, anything accepted by `pydantic_ai.direct.model_request`.
        model_settings: Optional settings for the model request.
        new_id: Factory for thread, run, message, tool call and spec ids.
        logger: The logger to use for logging.
    """

    run_request: RunRequest
    model: models.Model | models.KnownModelName | str
    model_settings: ModelSettings | None = None
    new_id: Callable[[], str] = field(default=random_id, repr=False)
    logger: logging.Logger = field(default=_LOGGER, repr=False)

    thread_id: str = field(init=False)
    run_id: str = field(init=False)

    system_prompt: ClassVar[str]

    def __post_init__(self) -> None:
        self.thread_id = self.run_request.thread_id or self.new_id()
        self.run_id = self.run_request.run_id or self.new_id()

    @property
    def tool_definitions(self) -> list[ToolDefinition]:
        """Tools advertised to the model."""
        return []

    @property
    def model_request_parameters(self) -> ModelRequestParameters:
        return ModelRequestParameters(function_tools=self.tool_definitions, allow_text_output=True)

    async def run(self) -> AsyncIterator[BaseEvent]:
        """Run the session.

        Yields:
            The events of the run, terminated by `run.finished` or `run.error`.
        """
        self.logger.debug('starting run thread_id=%s run_id=%s', self.thread_id, self.run_id)
        yield RunStartedEvent(thread_id=self.thread_id, run_id=self.run_id)

        try:
            history = self.build_history(self.run_request.messages)
            async for event in self.stream_events(history):
                yield event
        except RunError as e:
            self.logger.exception('stream run')
            yield RunErrorEvent(message=e.message, code=e.code)
        except AgentRunError as e:
            self.logger.exception('model request')
            error = ProviderError(message=str(e))
            yield RunErrorEvent(message=error.message, code=error.code)
        except Exception as e:
            self.logger.exception('unexpected error in stream run')
            yield RunErrorEvent(message=str(e), code='internal_error')
        else:
            yield RunFinishedEvent(thread_id=self.thread_id, run_id=self.run_id)

        self.logger.info('done thread_id=%s run_id=%s', self.thread_id, self.run_id)

    async def encode_stream(self) -> AsyncIterator[str]:
        """Run the session and encode every event as an SSE frame."""
        encoder = EventEncoder()
        async for event in self.run():
            yield encoder.encode(event)

    def build_history(self, messages: Sequence[ChatMessage]) -> list[ModelMessage]:
        """Convert the request messages into the provider history.

        Raises:
            NoMessagesError: If nothing is left once UI artifacts are dropped.
        """
        history = _convert_history(messages)
        if not history:
            raise NoMessagesError
        return [ModelRequest(parts=[SystemPromptPart(content=self.system_prompt)]), *history]

    async def request(self, history: list[ModelMessage]) -> ModelResponse:
        return await model_request(
            self.model,
            history,
            model_settings=self.model_settings,
            model_request_parameters=self.model_request_parameters,
        )

    @abstractmethod
    def stream_events(self, history: list[ModelMessage]) -> AsyncIterator[BaseEvent]:
        """Produce the events between `run.started` and the terminal event."""
        raise NotImplementedError


@dataclass(kw_only=True, repr=False)
class AGUISession(StreamSession):
    """Fixed-catalog session: the model picks UI tools by name.

    Every tool call is nested in the span of the assistant text message. If the model produced no
    text, a fallback sentence is sent so the message is never empty.

    Args:
        stream: Forward text and argument deltas as the provider produces them.
    """

    stream: bool = False

    system_prompt: ClassVar[str] = AGUI_SYSTEM_PROMPT

    @property
    def tool_definitions(self) -> list[ToolDefinition]:
        return catalog_tool_definitions()

    def stream_events(self, history: list[ModelMessage]) -> AsyncIterator[BaseEvent]:
        if self.stream:
            return self._streamed_events(history)
        return self._response_events(history)

    async def _response_events(self, history: list[ModelMessage]) -> AsyncIterator[BaseEvent]:
        response = await self.request(history)
        message_id = self.new_id()
        yield TextMessageStartEvent(message_id=message_id)

        text = ''.join(part.content for part in response.parts if isinstance(part, TextPart))
        if text:
            yield TextMessageContentEvent(message_id=message_id, delta=text)

        for part in response.parts:
            if not isinstance(part, ToolCallPart):
                continue
            tool_call_id = self.new_id()
            self.logger.debug('tool call %s id=%s', part.tool_name, tool_call_id)
            yield ToolCallStartEvent(
                tool_call_id=tool_call_id, tool_call_name=part.tool_name, parent_message_id=message_id
            )
            yield ToolCallArgsEvent(tool_call_id=tool_call_id, delta=part.args_as_json_str())
            yield ToolCallEndEvent(tool_call_id=tool_call_id)

        if not text:
            yield TextMessageContentEvent(message_id=message_id, delta=FALLBACK_TEXT)
        yield TextMessageEndEvent(message_id=message_id)

    async def _streamed_events(self, history: list[ModelMessage]) -> AsyncIterator[BaseEvent]:
        async with model_request_stream(
            self.model,
            history,
            model_settings=self.model_settings,
            model_request_parameters=self.model_request_parameters,
        ) as response:
            message_id = self.new_id()
            yield TextMessageStartEvent(message_id=message_id)

            # part index -> tool call id; providers may interleave parts, so calls are ended once the stream is done
            open_tool_calls: dict[int, str] = {}
            emitted_text = False

            async for event in response:
                match event:
                    case PartStartEvent(part=TextPart(content=content)):
                        if content:
                            emitted_text = True
                            yield TextMessageContentEvent(message_id=message_id, delta=content)
                    case PartStartEvent(index=index, part=ToolCallPart() as part):
                        if index in open_tool_calls:
                            continue
                        tool_call_id = self.new_id()
                        open_tool_calls[index] = tool_call_id
                        yield ToolCallStartEvent(
                            tool_call_id=tool_call_id,
                            tool_call_name=part.tool_name,
                            parent_message_id=message_id,
                        )
                        if delta := _args_fragment(part.args):
                            yield ToolCallArgsEvent(tool_call_id=tool_call_id, delta=delta)
                    case PartDeltaEvent(delta=TextPartDelta(content_delta=content_delta)):
                        if content_delta:
                            emitted_text = True
                            yield TextMessageContentEvent(message_id=message_id, delta=content_delta)
                    case PartDeltaEvent(index=index, delta=ToolCallPartDelta(args_delta=args_delta)):
                        tool_call_id = open_tool_calls.get(index)
                        if tool_call_id is None:
                            self.logger.debug('ignoring args delta for part %d', index)
                        elif delta := _args_fragment(args_delta):
                            yield ToolCallArgsEvent(tool_call_id=tool_call_id, delta=delta)
                    case _:
                        pass

            for tool_call_id in open_tool_calls.values():
                yield ToolCallEndEvent(tool_call_id=tool_call_id)

            if not emitted_text:
                yield TextMessageContentEvent(message_id=message_id, delta=FALLBACK_TEXT)
            yield TextMessageEndEvent(message_id=message_id)


@dataclass(kw_only=True, repr=False)
class A2UISession(StreamSession):
    """Declarative session: the model describes a component tree with `render_custom_ui`.

    The text message is closed before any specification is sent. Each specification is sent
    whole in a single `ui.spec` event, wrapped in a versioned envelope.
    """

    system_prompt: ClassVar[str] = A2UI_SYSTEM_PROMPT

    @property
    def tool_definitions(self) -> list[ToolDefinition]:
        return [custom_ui_tool_definition()]

    async def stream_events(self, history: list[ModelMessage]) -> AsyncIterator[BaseEvent]:
        response = await self.request(history)
        message_id = self.new_id()
        yield TextMessageStartEvent(message_id=message_id)
        text = ''.join(part.content for part in response.parts if isinstance(part, TextPart))
        if text:
            yield TextMessageContentEvent(message_id=message_id, delta=text)
        yield TextMessageEndEvent(message_id=message_id)

        for part in response.parts:
            if not isinstance(part, ToolCallPart):
                continue
            if part.tool_name != RENDER_CUSTOM_UI:
                self.logger.warning('ignoring unexpected tool call %r', part.tool_name)
                continue
            yield UISpecEvent(
                spec_id=self.new_id(),
                specification=_spec_envelope(part),
                parent_message_id=message_id,
            )


def _convert_history(messages: Sequence[ChatMessage]) -> list[ModelMessage]:
    """Convert request messages to a PydanticAI history, dropping rendered UI artifacts."""
    result: list[ModelMessage] = []
    for msg in messages:
        match msg.role:
            case Role.USER:
                result.append(ModelRequest(parts=[UserPromptPart(content=msg.content)]))
            case Role.ASSISTANT:
                result.append(ModelResponse(parts=[TextPart(content=msg.content)]))
            case Role.SYSTEM:
                result.append(ModelRequest(parts=[SystemPromptPart(content=msg.content)]))
            case Role.TOOL:
                # rendered UI artifacts are never sent to the model
                continue
    return result


def _args_fragment(args: str | dict[str, Any] | None) -> str:
    """JSON text of a streamed arguments fragment, empty if there is nothing to send."""
    if not args:
        return ''
    if isinstance(args, str):
        return args
    return pydantic_core.to_json(args).decode()


def _spec_envelope(part: ToolCallPart) -> dict[str, Any]:
    """Parse the `render_custom_ui` arguments into a versioned specification envelope, pruned to the parse limits.

    Raises:
        InvalidSpecificationError: If the arguments are not JSON or `specification` is not an object.
    """
    args: Any = part.args
    if isinstance(args, str):
        try:
            args = pydantic_core.from_json(args) if args else {}
        except ValueError as e:
            raise InvalidSpecificationError(message=f'{RENDER_CUSTOM_UI} arguments are not valid JSON: {e}') from e

    specification = args.get('specification') if isinstance(args, dict) else None
    if not isinstance(specification, dict):
        raise InvalidSpecificationError(message=f'{RENDER_CUSTOM_UI} specification must be a JSON object')

    specification = cast(dict[str, Any], specification)
    envelope = {'version': SPEC_VERSION, **{k: v for k, v in specification.items() if k != 'version'}}
    return prune_specification(envelope)
