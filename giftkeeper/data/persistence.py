"""
GiftKeeper — Background persistence writer.

Stores never wait on storage: each mutation hands a serialized snapshot to
the SnapshotWriter, a daemon thread that owns its own asyncio event loop
and applies jobs to the KeyValuePort strictly in submission order. Every
write is a full-collection replacement, so the last write wins.
"""

from __future__ import annotations

import asyncio
import logging
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from giftkeeper.ports.kv_port import KeyValuePort

logger = logging.getLogger(__name__)

ErrorHook = Callable[[Exception], None]


@dataclass
class _Job:
    op: str                             # "get" | "set" | "remove"
    key: str
    value: str | None = None
    on_error: ErrorHook | None = None
    result: Future | None = None


class SnapshotWriter(threading.Thread):
    """Single background writer shared by all stores of one tracker."""

    def __init__(self, port: KeyValuePort) -> None:
        super().__init__(name="giftkeeper-writer", daemon=True)
        self._port = port
        self._jobs: queue.Queue[_Job | None] = queue.Queue()
        self._start_lock = threading.Lock()
        self._launched = False
        self._closed = False

    @property
    def port(self) -> KeyValuePort:
        return self._port

    def run(self) -> None:
        logger.debug("Snapshot writer started")
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            while True:
                job = self._jobs.get()
                try:
                    if job is None:
                        return
                    loop.run_until_complete(self._apply(job))
                finally:
                    self._jobs.task_done()
        finally:
            loop.close()
            logger.debug("Snapshot writer stopped")

    async def _apply(self, job: _Job) -> None:
        try:
            if job.op == "get":
                value = await self._port.get(job.key)
                if job.result is not None:
                    job.result.set_result(value)
            elif job.op == "set":
                await self._port.set(job.key, job.value or "")
            else:
                await self._port.remove(job.key)
        except Exception as exc:
            logger.error("Persistence %s failed for %s: %s", job.op, job.key, exc)
            if job.result is not None:
                job.result.set_exception(exc)
            if job.on_error is not None:
                try:
                    job.on_error(exc)
                except Exception as hook_exc:
                    logger.error("Persistence error hook failed: %s", hook_exc)

    def _submit(self, job: _Job) -> bool:
        if self._closed:
            logger.warning("Writer closed, dropping %s for %s", job.op, job.key)
            return False
        with self._start_lock:
            if not self._launched:
                self._launched = True
                self.start()
        self._jobs.put(job)
        return True

    def write(self, key: str, value: str, on_error: ErrorHook | None = None) -> None:
        """Queue a full replacement of ``key``. Returns immediately."""
        self._submit(_Job("set", key, value=value, on_error=on_error))

    def remove(self, key: str, on_error: ErrorHook | None = None) -> None:
        """Queue removal of ``key``. Returns immediately."""
        self._submit(_Job("remove", key, on_error=on_error))

    def read(self, key: str, timeout: float | None = None) -> str | None:
        """Read ``key`` after every previously queued job has been applied.

        Blocks the caller; used once per store at startup.
        Raises whatever the port raised.
        """
        result: Future = Future()
        if not self._submit(_Job("get", key, result=result)):
            return None
        return result.result(timeout=timeout)

    def flush(self) -> None:
        """Block until every queued job has been applied."""
        self._jobs.join()

    def close(self) -> None:
        """Flush pending writes and stop the thread."""
        if self._closed:
            return
        self.flush()
        self._closed = True
        if self._launched:
            self._jobs.put(None)
            self.join()
