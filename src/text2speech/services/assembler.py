"""
Ordered Assembler for multi-fragment synthesis.

Each chunk of text is fetched as an independent audio fragment. This module
stitches those fragments back together in chunk order, in one of two modes:

- Sink mode (``write_to_sink``): fetch one fragment at a time, index 0 first,
  and append it to a file before moving on.
- Live-stream mode (``stream``): start every fetch at once and yield fragments
  in index order as soon as the next one in line has arrived.

Architecture (live-stream):

    fetch tasks (any completion order)
        │ put(index, bytes) / fail(index, error)
        ▼
    ┌──────────────┐   cursor 0..N-1   ┌──────────────┐
    │ ReorderBuffer│──────────────────▶│ async for ...│
    └──────────────┘                   └──────────────┘

The reorder buffer is the only shared state and is only touched while holding
its condition lock.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from contextlib import ExitStack
from typing import AsyncGenerator, BinaryIO, Dict, Iterable, Optional, Union

from ..errors import FetchError, SinkWriteError, SynthesisTimeoutError
from .fetcher import FragmentFetcher
from .request_builder import RequestDescriptor

logger = logging.getLogger(__name__)

SinkDestination = Union[str, "os.PathLike[str]", BinaryIO]


class ReorderBuffer:
    """
    Index-addressed holding area for fragments that arrive out of order.

    Fragments (or their failures) are settled exactly once per index. ``next()``
    waits until the fragment at the cursor is settled, releases it and advances
    the cursor, so every fragment is emitted once and in index order.
    """

    def __init__(self, total: int):
        if total < 1:
            raise ValueError("ReorderBuffer needs at least one fragment")
        self.total = total
        self._slots: Dict[int, Union[bytes, BaseException]] = {}
        self._cursor = 0
        self._condition = asyncio.Condition()

    @property
    def cursor(self) -> int:
        """Index of the next fragment to be released."""
        return self._cursor

    @property
    def buffered(self) -> int:
        """Number of settled fragments waiting for lower indices."""
        return len(self._slots)

    @property
    def done(self) -> bool:
        return self._cursor >= self.total

    async def put(self, index: int, fragment: bytes) -> None:
        await self._settle(index, fragment)

    async def fail(self, index: int, error: BaseException) -> None:
        await self._settle(index, error)

    async def _settle(self, index: int, outcome: Union[bytes, BaseException]) -> None:
        async with self._condition:
            if not 0 <= index < self.total:
                raise IndexError(f"Fragment index {index} out of range 0..{self.total - 1}")
            if index < self._cursor or index in self._slots:
                raise RuntimeError(f"Fragment {index} settled more than once")
            self._slots[index] = outcome
            self._condition.notify_all()

    async def next(self) -> bytes:
        """Wait for and release the fragment at the cursor."""
        async with self._condition:
            if self.done:
                raise RuntimeError("All fragments have already been released")
            await self._condition.wait_for(lambda: self._cursor in self._slots)
            outcome = self._slots.pop(self._cursor)
            self._cursor += 1

        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class OrderedAssembler:
    """
    Fetch fragments and deliver them in chunk order.

    Attributes:
        fetch: Coroutine function turning a request descriptor into bytes.
        max_concurrency: Optional cap on in-flight fetches in live-stream mode.
        timeout: Optional overall deadline (seconds) for a live stream.
    """

    def __init__(
        self,
        fetch: FragmentFetcher,
        *,
        max_concurrency: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.fetch = fetch
        self.max_concurrency = max_concurrency
        self.timeout = timeout

    async def _fetch(self, descriptor: RequestDescriptor) -> bytes:
        try:
            return await self.fetch(descriptor)
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(descriptor.chunk_index, str(exc) or repr(exc)) from exc

    # ------------------------------------------------------------------
    # Sink mode
    # ------------------------------------------------------------------

    @staticmethod
    async def _open_sink(destination: SinkDestination, stack: ExitStack) -> BinaryIO:
        if isinstance(destination, (str, os.PathLike)):
            try:
                handle = await asyncio.to_thread(open, destination, "wb")
            except OSError as exc:
                raise SinkWriteError(f"Cannot open {destination}: {exc}") from exc
            return stack.enter_context(handle)
        return destination

    @staticmethod
    def _append(sink: BinaryIO, fragment: bytes) -> None:
        sink.write(fragment)
        sink.flush()

    async def write_to_sink(
        self,
        descriptors: Iterable[RequestDescriptor],
        destination: SinkDestination,
    ) -> int:
        """
        Fetch fragments one by one and append them to ``destination``.

        The destination is opened (truncated) when the first fragment arrives
        and held open until the last one is written. A path destination is
        closed on exit; a caller-supplied file object is only flushed.

        Returns:
            Total number of bytes written.

        Raises:
            FetchError: A fragment could not be fetched. Earlier fragments
                remain written.
            SinkWriteError: The destination could not be opened or written.
        """
        descriptors = list(descriptors)
        if not descriptors:
            raise ValueError("Nothing to synthesize: no request descriptors")

        written = 0
        with ExitStack() as stack:
            sink: Optional[BinaryIO] = None
            for descriptor in descriptors:
                try:
                    fragment = await self._fetch(descriptor)
                except FetchError:
                    logger.error(
                        f"Aborting sink write after fragment {descriptor.chunk_index - 1} "
                        f"({written} bytes written)"
                    )
                    raise

                if sink is None:
                    sink = await self._open_sink(destination, stack)
                try:
                    await asyncio.to_thread(self._append, sink, fragment)
                except (OSError, ValueError) as exc:
                    raise SinkWriteError(
                        f"Failed writing fragment {descriptor.chunk_index}: {exc}"
                    ) from exc
                written += len(fragment)

        logger.info(f"Wrote {len(descriptors)} fragment(s), {written} bytes")
        return written

    # ------------------------------------------------------------------
    # Live-stream mode
    # ------------------------------------------------------------------

    async def _fetch_into(
        self,
        buffer: ReorderBuffer,
        descriptor: RequestDescriptor,
        semaphore: Optional[asyncio.Semaphore],
    ) -> None:
        try:
            if semaphore is None:
                fragment = await self._fetch(descriptor)
            else:
                async with semaphore:
                    fragment = await self._fetch(descriptor)
        except FetchError as exc:
            await buffer.fail(descriptor.chunk_index, exc)
            return
        await buffer.put(descriptor.chunk_index, fragment)

    async def stream(
        self, descriptors: Iterable[RequestDescriptor]
    ) -> AsyncGenerator[bytes, None]:
        """
        Fetch all fragments concurrently and yield them in index order.

        A fragment that completes early is held in the reorder buffer until
        every lower index has been yielded. If a fragment fails, its error is
        raised when the cursor reaches it. Closing the iterator early cancels
        the fetches still in flight.
        """
        descriptors = list(descriptors)
        if not descriptors:
            raise ValueError("Nothing to synthesize: no request descriptors")

        buffer = ReorderBuffer(len(descriptors))
        semaphore = (
            asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        )
        tasks = [
            asyncio.create_task(self._fetch_into(buffer, descriptor, semaphore))
            for descriptor in descriptors
        ]
        start = time.monotonic()
        deadline = start + self.timeout if self.timeout is not None else None
        delivered = 0

        try:
            while not buffer.done:
                if deadline is None:
                    fragment = await buffer.next()
                else:
                    remaining = max(0.0, deadline - time.monotonic())
                    try:
                        fragment = await asyncio.wait_for(buffer.next(), remaining)
                    except asyncio.TimeoutError as exc:
                        raise SynthesisTimeoutError(
                            buffer.cursor,
                            f"stream did not complete within {self.timeout}s",
                        ) from exc
                delivered += len(fragment)
                yield fragment
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            if pending:
                logger.info(f"Cancelled {len(pending)} pending fragment fetch(es)")

        elapsed = (time.monotonic() - start) * 1000
        logger.info(
            f"Streamed {len(descriptors)} fragment(s), {delivered} bytes in {elapsed:.0f}ms"
        )


__all__ = ["OrderedAssembler", "ReorderBuffer", "SinkDestination"]
