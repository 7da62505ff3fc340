"""Folds the events of one run into a `Conversation`."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import pydantic_core

from ..events import (
    Event,
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
from ..render.spec import ParseLimits, parse_specification
from .conversation import AssistantTextEntry, Conversation, ErrorEntry, ToolCallEntry, UISpecEntry

__all__ = ['RunAccumulator']

_LOGGER: logging.Logger = logging.getLogger(__name__)


@dataclass(repr=False)
class _ToolCallBuffer:
    """Arguments of a tool call received so far."""

    tool_call_id: str
    tool_name: str
    parent_message_id: str
    fragments: list[str] = field(default_factory=list)


@dataclass(kw_only=True, repr=False)
class RunAccumulator:
    """Applies the events of a run to a conversation.

    All buffers belong to the current run: they are discarded on the terminal event, and on a new
    `run.started`. Events arriving after the terminal event are ignored. A tool call only becomes
    visible once its arguments are complete and parse as a JSON object.

    Args:
        conversation: The conversation to update.
        parse_limits: Bounds for parsing UI specifications.
        logger: The logger to use for logging.
    """

    conversation: Conversation
    parse_limits: ParseLimits = field(default_factory=ParseLimits)
    logger: logging.Logger = field(default=_LOGGER)

    thread_id: str | None = field(default=None, init=False)
    run_id: str | None = field(default=None, init=False)
    finished: bool = field(default=False, init=False)

    _messages: dict[str, AssistantTextEntry] = field(default_factory=dict, init=False)
    _tool_calls: dict[str, _ToolCallBuffer] = field(default_factory=dict, init=False)

    def apply(self, event: Event) -> None:
        """Apply one event."""
        if isinstance(event, RunStartedEvent):
            self._start(event)
            return
        if self.finished:
            self.logger.debug('ignoring %s after the end of the run', event.type)
            return

        match event:
            case TextMessageStartEvent(message_id=message_id):
                entry = AssistantTextEntry(message_id)
                self._messages[message_id] = entry
                self.conversation.entries.append(entry)
            case TextMessageContentEvent(message_id=message_id, delta=delta):
                if (entry := self._open_message(message_id, event.type)) is not None:
                    entry.content += delta
            case TextMessageEndEvent(message_id=message_id):
                if (entry := self._open_message(message_id, event.type)) is not None:
                    entry.complete = True
                    del self._messages[message_id]
            case ToolCallStartEvent():
                self._tool_calls[event.tool_call_id] = _ToolCallBuffer(
                    event.tool_call_id, event.tool_call_name, event.parent_message_id
                )
            case ToolCallArgsEvent(tool_call_id=tool_call_id, delta=delta):
                if (buffer := self._open_tool_call(tool_call_id, event.type)) is not None:
                    buffer.fragments.append(delta)
            case ToolCallEndEvent(tool_call_id=tool_call_id):
                if (buffer := self._open_tool_call(tool_call_id, event.type)) is not None:
                    del self._tool_calls[tool_call_id]
                    self._complete_tool_call(buffer)
            case UISpecEvent():
                self.conversation.entries.append(
                    UISpecEntry(
                        event.spec_id,
                        event.specification,
                        parse_specification(event.specification, self.parse_limits),
                        event.parent_message_id,
                    )
                )
            case RunFinishedEvent():
                self._finish()
            case RunErrorEvent(message=message, code=code):
                self.conversation.entries.append(ErrorEntry(message, code))
                self._finish()

    def fail(self, message: str, code: str) -> None:
        """End the run with an error raised on the client side, unless it already ended."""
        if self.finished:
            return
        self.conversation.entries.append(ErrorEntry(message, code))
        self._finish()

    def _start(self, event: RunStartedEvent) -> None:
        if self._messages or self._tool_calls:
            self.logger.debug('new run %s, discarding buffers of %s', event.run_id, self.run_id)
        self._reset()
        self.thread_id = event.thread_id
        self.run_id = event.run_id
        self.finished = False
        self.conversation.thread_id = event.thread_id
        self.conversation.loading = True

    def _finish(self) -> None:
        if self._tool_calls:
            self.logger.warning('run ended with %d unfinished tool calls', len(self._tool_calls))
        self._reset()
        self.finished = True
        self.conversation.loading = False

    def _reset(self) -> None:
        for entry in self._messages.values():
            entry.complete = True
        self._messages.clear()
        self._tool_calls.clear()

    def _open_message(self, message_id: str, event_type: str) -> AssistantTextEntry | None:
        entry = self._messages.get(message_id)
        if entry is None:
            self.logger.warning('ignoring %s for unknown message %s', event_type, message_id)
        return entry

    def _open_tool_call(self, tool_call_id: str, event_type: str) -> _ToolCallBuffer | None:
        buffer = self._tool_calls.get(tool_call_id)
        if buffer is None:
            self.logger.warning('ignoring %s for unknown tool call %s', event_type, tool_call_id)
        return buffer

    def _complete_tool_call(self, buffer: _ToolCallBuffer) -> None:
        arguments = ''.join(buffer.fragments)
        try:
            args: Any = pydantic_core.from_json(arguments or '{}')
        except ValueError as e:
            self.logger.warning('dropping tool call %s with invalid arguments: %s', buffer.tool_call_id, e)
            return
        if not isinstance(args, dict):
            self.logger.warning('dropping tool call %s, arguments are not an object', buffer.tool_call_id)
            return
        self.conversation.entries.append(
            ToolCallEntry(buffer.tool_call_id, buffer.tool_name, args, buffer.parent_message_id)
        )
