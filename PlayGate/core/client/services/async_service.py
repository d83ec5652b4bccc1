"""
Async service running an event loop in a background thread.

Coroutines submitted with ``run_async`` execute on that loop; the caller gets
a ``concurrent.futures.Future`` it can poll with ``done()`` without blocking.
"""
import asyncio
import concurrent.futures
import threading
from typing import Coroutine, Optional

from PlayGate.core.logging import get_logger

logger = get_logger(__name__)


class AsyncService:
    """Manages an asyncio event loop in a background thread."""

    def __init__(self, name: str = "playgate-async", daemon: bool = True):
        self._name = name
        self._daemon = daemon
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._ready = threading.Event()
        self._lock = threading.Lock()

    def start(self) -> None:
        """Start the event loop thread and wait until the loop exists."""
        with self._lock:
            if self._running:
                return

            self._ready.clear()

            def run_loop():
                self._loop = asyncio.new_event_loop()
                asyncio.set_event_loop(self._loop)
                self._ready.set()
                try:
                    self._loop.run_forever()
                finally:
                    self._loop.close()

            self._thread = threading.Thread(target=run_loop, name=self._name, daemon=self._daemon)
            self._thread.start()
            self._ready.wait()
            self._running = True
            logger.debug("Async service '%s' started", self._name)

    def stop(self, timeout: float = 2.0) -> None:
        """Cancel pending tasks and stop the loop."""
        with self._lock:
            if not self._running:
                return

            loop, thread = self._loop, self._thread
            fut = asyncio.run_coroutine_threadsafe(self._cancel_pending(), loop)
            try:
                fut.result(timeout=timeout)
            except concurrent.futures.TimeoutError:
                logger.warning("Async service '%s' did not cancel its tasks in %.1fs", self._name, timeout)
            loop.call_soon_threadsafe(loop.stop)

            if thread.is_alive():
                thread.join(timeout=timeout)

            self._running = False
            self._loop = None
            self._thread = None
            self._ready.clear()
            logger.debug("Async service '%s' stopped", self._name)

    async def _cancel_pending(self) -> None:
        """Cancel every other task on the loop and wait for them to finish."""
        current = asyncio.current_task()
        tasks = [t for t in asyncio.all_tasks() if t is not current]
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def run_async(self, coro: Coroutine) -> concurrent.futures.Future:
        """Schedule a coroutine on the loop, starting the service if needed."""
        if not self.is_running():
            self.start()
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def is_running(self) -> bool:
        """Check if the async service is running."""
        return self._running and self._loop is not None


_default_service: Optional[AsyncService] = None
_default_lock = threading.Lock()


def get_async_service() -> AsyncService:
    """Return the process-wide service, starting it on first use."""
    global _default_service
    with _default_lock:
        if _default_service is None:
            _default_service = AsyncService()
        _default_service.start()
        return _default_service
