"""SSE framing of events.

A frame is `data: <json>` followed by a blank line. Decoding never raises: a frame that cannot be
turned into a known event is logged and skipped so one bad frame cannot abort a stream.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from .consts import DATA_PREFIX, FRAME_DELIMITER, SSE_CONTENT_TYPE
from .events import BaseEvent, Event, event_ta

__all__ = ['EventEncoder', 'encode_event', 'decode_frame', 'decode_payload']

_LOGGER: logging.Logger = logging.getLogger(__name__)


def encode_event(event: BaseEvent) -> str:
    """Encode an event as a single SSE frame, delimiter included."""
    return f'{DATA_PREFIX} {event.model_dump_json(by_alias=True, exclude_none=True)}{FRAME_DELIMITER}'


class EventEncoder:
    """Encodes events for an HTTP response body."""

    def get_content_type(self) -> str:
        """Returns the content type of the encoded stream."""
        return SSE_CONTENT_TYPE

    def encode(self, event: BaseEvent) -> str:
        """Encode an event as an SSE frame.

        Args:
            event: The event to encode.

        Returns:
            The SSE frame, terminated by a blank line.
        """
        return encode_event(event)


def decode_payload(payload: str | bytes) -> Event | None:
    """Decode the JSON payload of a frame.

    Args:
        payload: The JSON document carried by the `data` field.

    Returns:
        The event, or `None` if the payload is not valid JSON or not a known event.
    """
    try:
        return event_ta.validate_json(payload)
    except ValidationError as e:
        _LOGGER.warning('skipping malformed frame: %s (%d errors)', _preview(payload), e.error_count())
        return None


def decode_frame(frame: str) -> Event | None:
    """Decode one SSE frame, without its terminating blank line.

    Comment lines and fields other than `data` are ignored; several `data` lines are joined
    with newlines as SSE requires.

    Args:
        frame: The text of the frame.

    Returns:
        The event, or `None` if the frame is to be skipped.
    """
    data_lines: list[str] = []
    for line in frame.split('\n'):
        if not line.startswith(DATA_PREFIX):
            continue
        value = line[len(DATA_PREFIX) :]
        data_lines.append(value[1:] if value.startswith(' ') else value)

    if not data_lines:
        if frame.strip() and not frame.lstrip().startswith(':'):
            _LOGGER.warning('skipping frame without data: %s', _preview(frame))
        return None

    return decode_payload('\n'.join(data_lines))


def _preview(text: str | bytes, limit: int = 200) -> str:
    if isinstance(text, bytes):
        text = text.decode('utf-8', errors='replace')
    return text if len(text) <= limit else f'{text[:limit]}...'
