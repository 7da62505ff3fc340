"""Constants for the generative UI streaming protocol."""

from __future__ import annotations

from typing import Final

SSE_CONTENT_TYPE: Final[str] = 'text/event-stream'
"""Content type header value for Server-Sent Events (SSE)."""

SSE_HEADERS: Final[dict[str, str]] = {
    'Cache-Control': 'no-cache',
    'Connection': 'keep-alive',
    'X-Accel-Buffering': 'no',
}
"""Extra response headers sent with every event stream."""

DATA_PREFIX: Final[str] = 'data:'
"""Field name that prefixes the JSON payload of a frame."""

FRAME_DELIMITER: Final[str] = '\n\n'
"""Blank line that terminates a frame."""

SPEC_VERSION: Final[str] = '1.0'
"""Version tag of the declarative UI specification envelope."""

FALLBACK_TEXT: Final[str] = "Here's what I generated for you:"
"""Text sent when the model answers with tool calls only, or with nothing at all."""

UI_ARTIFACT_PLACEHOLDER: Final[str] = '[Generated UI Component]'
"""Content used for rendered UI artifacts when a conversation is sent back to the server."""
