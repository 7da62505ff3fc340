"""Enums for the generative UI streaming protocol."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Enum for conversation message roles.

    `TOOL` marks a previously rendered UI artifact; those messages are never sent back to the model.
    """

    ASSISTANT = 'assistant'
    USER = 'user'
    SYSTEM = 'system'
    TOOL = 'tool'
