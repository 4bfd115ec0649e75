"""Transform concurrency layer.

Architecture:
    FastAPI (async) -> slot semaphore(N) -> ThreadPoolExecutor(N) -> Pillow decode/resize/encode

A slot belongs to a job from submission until its worker thread returns. A
request that stops waiting (timeout or cancellation) does not give the slot
back early, so at most N transforms ever run and later requests queue for a
slot instead of piling up inside the executor.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

    from imagescaler.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransformPool:
    """Runs blocking image work on worker threads, ``max_concurrent`` jobs at a time.

    Counters are only touched from the event loop thread.
    """

    def __init__(self, settings: Settings) -> None:
        self._slots = asyncio.Semaphore(settings.max_concurrent)
        self._executor = ThreadPoolExecutor(
            max_workers=settings.max_concurrent,
            thread_name_prefix="image-transform",
        )
        self._queue_timeout = settings.queue_timeout
        self._jobs: set[asyncio.Future[Any]] = set()
        self._waiting = 0

    async def _acquire_slot(self) -> None:
        self._waiting += 1
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=self._queue_timeout)
        except TimeoutError:
            logger.warning(
                "No transform slot free after %.2fs (%d running, %d waiting)",
                self._queue_timeout,
                len(self._jobs),
                self._waiting - 1,
            )
            raise
        finally:
            self._waiting -= 1

    def _finish_job(self, job: asyncio.Future[Any]) -> None:
        self._jobs.discard(job)
        self._slots.release()

    async def run(self, func: Callable[..., T], *args: object) -> T:
        """Run ``func(*args)`` on a worker thread once a slot is free.

        Cancelling the caller does not interrupt the worker; the slot is
        released when the worker returns.

        Raises:
            TimeoutError: If no slot frees up within ``queue_timeout``.
        """
        await self._acquire_slot()
        loop = asyncio.get_running_loop()
        try:
            job = loop.run_in_executor(self._executor, func, *args)
        except BaseException:
            self._slots.release()
            raise
        self._jobs.add(job)
        job.add_done_callback(self._finish_job)
        return await asyncio.shield(job)

    @property
    def active_count(self) -> int:
        """Number of jobs occupying a worker thread."""
        return len(self._jobs)

    @property
    def queue_depth(self) -> int:
        """Number of requests waiting for a slot."""
        return self._waiting

    def shutdown(self) -> None:
        """Wait for running jobs and stop the worker threads."""
        self._executor.shutdown(wait=True)
