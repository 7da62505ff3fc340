"""Client-side conversation state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .._enums import Role
from ..consts import UI_ARTIFACT_PLACEHOLDER
from ..render.spec import UINode
from ..request_types import ChatMessage

__all__ = [
    'UserEntry',
    'AssistantTextEntry',
    'ToolCallEntry',
    'UISpecEntry',
    'ErrorEntry',
    'Entry',
    'Conversation',
]


@dataclass
class UserEntry:
    content: str


@dataclass
class AssistantTextEntry:
    message_id: str
    content: str = ''
    complete: bool = False


@dataclass
class ToolCallEntry:
    """A completed fixed-catalog tool call, ready to be rendered."""

    tool_call_id: str
    tool_name: str
    args: dict[str, Any]
    parent_message_id: str


@dataclass
class UISpecEntry:
    """A declarative UI specification and its parsed tree."""

    spec_id: str
    specification: dict[str, Any]
    tree: UINode
    parent_message_id: str | None = None


@dataclass
class ErrorEntry:
    message: str
    code: str


Entry = UserEntry | AssistantTextEntry | ToolCallEntry | UISpecEntry | ErrorEntry


@dataclass
class Conversation:
    """Ordered entries of a conversation, as displayed to the user.

    `loading` is set while a run is in flight.
    """

    entries: list[Entry] = field(default_factory=list)
    loading: bool = False
    thread_id: str | None = None

    def add_user_message(self, content: str) -> UserEntry:
        entry = UserEntry(content)
        self.entries.append(entry)
        return entry

    def to_messages(self) -> list[ChatMessage]:
        """Convert the entries into request messages for the next run.

        Rendered UI is sent with the `tool` role so the server can drop it from the model history.
        Errors are not sent.
        """
        messages: list[ChatMessage] = []
        for entry in self.entries:
            match entry:
                case UserEntry(content=content):
                    messages.append(ChatMessage(role=Role.USER, content=content))
                case AssistantTextEntry(content=content) if content:
                    messages.append(ChatMessage(role=Role.ASSISTANT, content=content))
                case ToolCallEntry() | UISpecEntry():
                    messages.append(ChatMessage(role=Role.TOOL, content=UI_ARTIFACT_PLACEHOLDER))
                case _:
                    pass
        return messages
