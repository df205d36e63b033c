# ui_context.py
# The single serial execution context that owns every piece of screen state.
# Worker threads never touch the map or the address label; they post() here.

import logging
import queue
import threading
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class UIContext:
    """
    Serial task queue drained by one owning thread.

    Usage:
        ui = UIContext()                 # owned by the constructing thread
        ui.post(label.set_text, "...")   # safe from any thread

        # Owning thread:
        ui.run_pending()
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[tuple]" = queue.Queue()
        self._owner = threading.get_ident()

    def is_current(self) -> bool:
        return threading.get_ident() == self._owner

    def post(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Enqueue fn(*args, **kwargs) to run on the owning thread."""
        self._queue.put((fn, args, kwargs))

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run_pending(self, timeout: Optional[float] = None) -> int:
        """
        Run queued tasks on the calling (owning) thread.

        Args:
            timeout: If given, keep waiting for new tasks until the queue has
                     stayed empty for this many seconds.

        Returns:
            Number of tasks executed.
        """
        if not self.is_current():
            raise RuntimeError("run_pending() must be called from the UI thread")

        executed = 0
        while True:
            try:
                if timeout is None:
                    fn, args, kwargs = self._queue.get_nowait()
                else:
                    fn, args, kwargs = self._queue.get(timeout=timeout)
            except queue.Empty:
                return executed

            try:
                fn(*args, **kwargs)
            except Exception:
                logger.exception(f"UI task {getattr(fn, '__qualname__', fn)} failed")
            finally:
                self._queue.task_done()
            executed += 1

    def run_until(self, predicate: Callable[[], bool], timeout: float = 5.0, poll_s: float = 0.05) -> bool:
        """Drain tasks until predicate() holds or timeout expires. Returns predicate()."""
        deadline = time.monotonic() + timeout
        while not predicate():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            self.run_pending(timeout=min(poll_s, remaining))
        return predicate()
