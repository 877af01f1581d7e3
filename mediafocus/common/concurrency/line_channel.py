from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Union

from mediafocus.domain.enums.exit_status import EngineExitStatus


@dataclass(frozen=True)
class StreamEnd:
    """Sentinel closing a line stream. Carries the engine's exit status."""
    exit_status: EngineExitStatus
    return_code: Optional[int] = None


class LineChannel:
    """
    Bounded, ordered hand-off between the engine adapter (producer) and the
    run consumer.

    Features
    --------
    - put(line) applies backpressure when `maxsize` lines are pending
    - close(end) enqueues the StreamEnd sentinel; put() afterwards is an error
    - `async for line in channel` yields lines until the sentinel, then
      exposes it as `channel.end`

    Notes
    -----
    - Single producer, single consumer. The consumer never polls; it awaits items.
    """

    def __init__(self, maxsize: int = 1024) -> None:
        self._queue: asyncio.Queue[Union[str, StreamEnd]] = asyncio.Queue(maxsize=max(0, maxsize))
        self._closed = False
        self._end: Optional[StreamEnd] = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def end(self) -> Optional[StreamEnd]:
        """The sentinel, once the consumer has reached it."""
        return self._end

    async def put(self, line: str) -> None:
        if self._closed:
            raise RuntimeError("put() after close()")
        await self._queue.put(line)

    async def close(self, end: StreamEnd) -> None:
        if self._closed:
            return
        self._closed = True
        await self._queue.put(end)

    async def get(self) -> Union[str, StreamEnd]:
        item = await self._queue.get()
        if isinstance(item, StreamEnd):
            self._end = item
        return item

    def __aiter__(self) -> AsyncIterator[str]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[str]:
        while True:
            item = await self.get()
            if isinstance(item, StreamEnd):
                return
            yield item
