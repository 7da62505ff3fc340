"""Event vocabulary of the generative UI stream.

Every event is one SSE frame. Both the fixed-catalog (AGUI) and the declarative (A2UI) endpoints
share this vocabulary; they only differ in which events they emit.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, TypeAdapter
from pydantic.alias_generators import to_camel

__all__ = [
    'CamelBaseModel',
    'BaseEvent',
    'RunStartedEvent',
    'RunFinishedEvent',
    'RunErrorEvent',
    'TextMessageStartEvent',
    'TextMessageContentEvent',
    'TextMessageEndEvent',
    'ToolCallStartEvent',
    'ToolCallArgsEvent',
    'ToolCallEndEvent',
    'UISpecEvent',
    'Event',
    'event_ta',
]


class CamelBaseModel(BaseModel):
    """Base model with snake_case attributes and camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class BaseEvent(CamelBaseModel):
    """Base class for all events."""

    type: str


class RunStartedEvent(BaseEvent):
    """First event of every run."""

    type: Literal['run.started'] = 'run.started'
    thread_id: str
    run_id: str


class RunFinishedEvent(BaseEvent):
    """Terminal event of a successful run."""

    type: Literal['run.finished'] = 'run.finished'
    thread_id: str
    run_id: str


class RunErrorEvent(BaseEvent):
    """Terminal event of a failed run."""

    type: Literal['run.error'] = 'run.error'
    message: str
    code: str


class TextMessageStartEvent(BaseEvent):
    """Opens an assistant text message."""

    type: Literal['text_message.start'] = 'text_message.start'
    message_id: str
    role: Literal['assistant'] = 'assistant'


class TextMessageContentEvent(BaseEvent):
    """A text fragment to append to an open message."""

    type: Literal['text_message.content'] = 'text_message.content'
    message_id: str
    delta: str


class TextMessageEndEvent(BaseEvent):
    """Closes an assistant text message."""

    type: Literal['text_message.end'] = 'text_message.end'
    message_id: str


class ToolCallStartEvent(BaseEvent):
    """Opens a fixed-catalog tool call nested in its parent message."""

    type: Literal['tool_call.start'] = 'tool_call.start'
    tool_call_id: str
    tool_call_name: str
    parent_message_id: str


class ToolCallArgsEvent(BaseEvent):
    """A fragment of the JSON-encoded tool call arguments."""

    type: Literal['tool_call.args'] = 'tool_call.args'
    tool_call_id: str
    delta: str


class ToolCallEndEvent(BaseEvent):
    """Marks the tool call arguments as complete."""

    type: Literal['tool_call.end'] = 'tool_call.end'
    tool_call_id: str


class UISpecEvent(BaseEvent):
    """A complete declarative UI specification, sent atomically."""

    type: Literal['ui.spec'] = 'ui.spec'
    spec_id: str
    specification: dict[str, Any]
    """The versioned envelope: `{"version": "1.0", "component": ..., ...}`."""
    parent_message_id: str | None = None


Event = Annotated[
    RunStartedEvent
    | RunFinishedEvent
    | RunErrorEvent
    | TextMessageStartEvent
    | TextMessageContentEvent
    | TextMessageEndEvent
    | ToolCallStartEvent
    | ToolCallArgsEvent
    | ToolCallEndEvent
    | UISpecEvent,
    Discriminator('type'),
]
"""Union of all events, discriminated by `type`."""

event_ta: TypeAdapter[Event] = TypeAdapter(Event)
