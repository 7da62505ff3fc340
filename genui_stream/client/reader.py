"""Incremental reader of an SSE byte stream."""

from __future__ import annotations

import codecs
from collections.abc import AsyncIterable, AsyncIterator

from ..consts import FRAME_DELIMITER
from ..encoder import decode_frame
from ..events import Event

__all__ = ['EventStreamReader']


class EventStreamReader:
    """Turns arbitrarily split chunks of an SSE response into events.

    Chunk boundaries may fall anywhere, including inside a multi-byte character or between the
    two newlines of a frame delimiter. Frames that do not decode to a known event are skipped.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
        self._buffer = ''
        self.skipped = 0
        """Number of frames that did not decode to an event."""

    def feed(self, chunk: bytes) -> list[Event]:
        """Feed a chunk of the response body.

        Args:
            chunk: The raw bytes received.

        Returns:
            The events completed by this chunk, in order.
        """
        return self._consume(self._decoder.decode(chunk), final=False)

    def close(self) -> list[Event]:
        """Flush the reader at the end of the body.

        A trailing frame without a delimiter is still decoded.
        """
        events = self._consume(self._decoder.decode(b'', final=True), final=True)
        tail, self._buffer = self._buffer, ''
        if tail.strip():
            events.extend(self._decode(tail))
        return events

    async def aiter_events(self, chunks: AsyncIterable[bytes]) -> AsyncIterator[Event]:
        """Read events from an async iterator of byte chunks, such as `httpx.Response.aiter_bytes()`."""
        async for chunk in chunks:
            for event in self.feed(chunk):
                yield event
        for event in self.close():
            yield event

    def _consume(self, text: str, *, final: bool) -> list[Event]:
        buffer = self._buffer + text
        # a CR at the end may be the first half of a CRLF
        held = ''
        if not final and buffer.endswith('\r'):
            buffer, held = buffer[:-1], '\r'
        buffer = buffer.replace('\r\n', '\n').replace('\r', '\n')

        events: list[Event] = []
        while FRAME_DELIMITER in buffer:
            frame, buffer = buffer.split(FRAME_DELIMITER, 1)
            events.extend(self._decode(frame))
        self._buffer = buffer + held
        return events

    def _decode(self, frame: str) -> list[Event]:
        if not frame.strip():
            return []
        event = decode_frame(frame)
        if event is None:
            self.skipped += 1
            return []
        return [event]
