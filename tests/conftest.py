from __future__ import annotations

from collections.abc import Callable, Sequence
from itertools import count
from typing import Any

import pytest

from genui_stream._enums import Role
from genui_stream.events import BaseEvent
from genui_stream.request_types import ChatMessage, RunRequest

IdFactory = Callable[[], str]


@pytest.fixture
def anyio_backend() -> str:
    return 'asyncio'


@pytest.fixture
def new_id() -> IdFactory:
    """Sequential ids, `id-1`, `id-2`, ..., for deterministic event streams."""
    counter = count(1)

    def _new_id() -> str:
        return f'id-{next(counter)}'

    return _new_id


def run_request(*messages: tuple[str, str], thread_id: str | None = None, run_id: str | None = None) -> RunRequest:
    return RunRequest(
        messages=[ChatMessage(role=Role(role), content=content) for role, content in messages],
        thread_id=thread_id,
        run_id=run_id,
    )


def dump_events(events: Sequence[BaseEvent]) -> list[dict[str, Any]]:
    return [event.model_dump(mode='json', by_alias=True, exclude_none=True) for event in events]
