from .accumulator import RunAccumulator
from .client import CONNECTION_ERROR, Endpoint, GenUIClient
from .conversation import (
    AssistantTextEntry,
    Conversation,
    Entry,
    ErrorEntry,
    ToolCallEntry,
    UISpecEntry,
    UserEntry,
)
from .reader import EventStreamReader

__all__ = [
    'CONNECTION_ERROR',
    'AssistantTextEntry',
    'Conversation',
    'Endpoint',
    'Entry',
    'ErrorEntry',
    'EventStreamReader',
    'GenUIClient',
    'RunAccumulator',
    'ToolCallEntry',
    'UISpecEntry',
    'UserEntry',
]
