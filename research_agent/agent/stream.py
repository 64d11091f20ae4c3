"""
Progress-event sinks for live tool updates.

The orchestrator writes a 'data' event before each tool call and a
'message annotation' event after it. Writes are fire-and-forget and must be
delivered in write order.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Any, Protocol

DATA = "data"
MESSAGE_ANNOTATION = "message_annotation"


class DataStreamWriter(Protocol):
    def write_data(self, value: dict[str, Any]) -> None: ...

    def write_message_annotation(self, value: dict[str, Any]) -> None: ...


class RecordingDataStream:
    """Keeps every write in order. Used by the non-streaming endpoint and tests."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def write_data(self, value: dict[str, Any]) -> None:
        self.events.append((DATA, value))

    def write_message_annotation(self, value: dict[str, Any]) -> None:
        self.events.append((MESSAGE_ANNOTATION, value))


class QueueDataStream:
    """
    Pushes writes onto an asyncio.Queue so an SSE response can forward them
    while the pipeline is still running. Iterate with `async for`; iteration
    ends after close().
    """

    _CLOSED = object()

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()

    def write_data(self, value: dict[str, Any]) -> None:
        self._queue.put_nowait((DATA, value))

    def write_message_annotation(self, value: dict[str, Any]) -> None:
        self._queue.put_nowait((MESSAGE_ANNOTATION, value))

    def close(self) -> None:
        self._queue.put_nowait(self._CLOSED)

    async def __aiter__(self) -> AsyncIterator[tuple[str, dict[str, Any]]]:
        while True:
            item = await self._queue.get()
            if item is self._CLOSED:
                return
            yield item
