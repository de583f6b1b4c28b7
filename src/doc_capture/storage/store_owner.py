"""Single-writer owner for entry store mutations.

This module contains the StoreOwner class. Every mutation of the entry
store is submitted as a message to one worker task running on the event
loop; callers await the result instead of checking which thread they are
on. Mutations are therefore never applied concurrently.
"""

import asyncio
import functools
import logging
from typing import Any, Callable, Optional, Tuple

from .entry_store import EntryStore

__all__ = ["StoreOwner"]

logger = logging.getLogger(__name__)

_Message = Tuple[Callable[[], Any], "asyncio.Future[Any]"]


class StoreOwner:
    """Serializes access to an ``EntryStore`` through a message queue.

    Attributes:
        store: The owned entry store
    """

    def __init__(self, store: EntryStore) -> None:
        self.store: EntryStore = store
        self._queue: Optional["asyncio.Queue[_Message]"] = None
        self._worker: Optional["asyncio.Task[None]"] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    async def call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run ``func(*args, **kwargs)`` on the owner and return its result.

        Exceptions raised by ``func`` are re-raised in the caller.
        """
        self._ensure_worker()
        future: "asyncio.Future[Any]" = self._loop.create_future()
        await self._queue.put((functools.partial(func, *args, **kwargs), future))
        return await future

    def call_threadsafe(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run ``func`` on the owner from a non-loop thread, blocking until done.

        Raises:
            RuntimeError: If the owner has not been started on a running loop
        """
        if self._loop is None or not self._loop.is_running():
            raise RuntimeError("StoreOwner is not attached to a running event loop")
        future = asyncio.run_coroutine_threadsafe(self.call(func, *args, **kwargs), self._loop)
        return future.result()

    async def start(self) -> None:
        self._ensure_worker()

    async def close(self) -> None:
        """Stop the worker after the messages already queued have run."""
        if self._worker is None:
            return
        await self._queue.join()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        self._queue = None
        self._loop = None

    def _ensure_worker(self) -> None:
        loop = asyncio.get_running_loop()
        if self._worker is not None and not self._worker.done() and self._loop is loop:
            return
        self._loop = loop
        self._queue = asyncio.Queue()
        self._worker = loop.create_task(self._run())

    async def _run(self) -> None:
        while True:
            work, future = await self._queue.get()
            try:
                if not future.cancelled():
                    future.set_result(work())
            except Exception as e:
                logger.debug("Store mutation raised %s", e)
                if not future.cancelled():
                    future.set_exception(e)
            finally:
                self._queue.task_done()
