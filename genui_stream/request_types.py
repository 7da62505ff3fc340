"""Request body of the streaming endpoints."""

from __future__ import annotations

from pydantic import TypeAdapter

from ._enums import Role
from .events import CamelBaseModel

__all__ = ['ChatMessage', 'RunRequest', 'run_request_ta']


class ChatMessage(CamelBaseModel):
    """One message of the conversation history."""

    role: Role
    content: str


class RunRequest(CamelBaseModel):
    """Body of `POST /api/agui` and `POST /api/a2ui`.

    Missing ids are generated by the session.
    """

    messages: list[ChatMessage]
    thread_id: str | None = None
    run_id: str | None = None


run_request_ta: TypeAdapter[RunRequest] = TypeAdapter(RunRequest)
