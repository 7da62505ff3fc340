"""Streaming of AI-generated user interfaces over Server-Sent Events.

Two strategies share one event protocol:

- the fixed catalog (`AGUISession`), where the model picks UI tools from a closed set;
- declarative specifications (`A2UISession`), where the model describes a component tree.
"""

from __future__ import annotations

from ._enums import Role
from ._exceptions import InvalidSpecificationError, NoMessagesError, ProviderError, RunError
from .app import GenUIApp, create_app
from .consts import SSE_CONTENT_TYPE
from .encoder import EventEncoder, decode_frame, encode_event
from .events import Event
from .request_types import ChatMessage, RunRequest
from .session import A2UISession, AGUISession, StreamSession
from .settings import Settings

__all__ = [
    'A2UISession',
    'AGUISession',
    'ChatMessage',
    'Event',
    'EventEncoder',
    'GenUIApp',
    'InvalidSpecificationError',
    'NoMessagesError',
    'ProviderError',
    'Role',
    'RunError',
    'RunRequest',
    'SSE_CONTENT_TYPE',
    'Settings',
    'StreamSession',
    'create_app',
    'decode_frame',
    'encode_event',
]
