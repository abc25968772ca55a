# dairy_ledger/database/debounce.py
"""
Debounced persistence for keystroke-driven edits.

Typing "120" into a quantity cell produces three edits in quick succession.
DebouncedWriter holds each write until input for the same key has been quiet
for `delay` seconds; a new submit for that key restarts the wait and replaces
the pending write, so only the last value reaches storage.

Public API
----------
- DebouncedWriter(delay, on_error=None).submit(key, fn, *args, **kwargs)
- DebouncedWriter.flush()   run every pending write now
- DebouncedWriter.cancel()  drop every pending write
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Hashable, Optional

from ..constants import DEBOUNCE_SECONDS

__all__ = ["DebouncedWriter"]

_log = logging.getLogger(__name__)


class DebouncedWriter:
    """
    on_error(key, exc) is called when a write fails on the timer thread, so
    the entry layer can tell the user the value was not saved. The failure
    is logged either way.
    """

    def __init__(
        self,
        delay: float = DEBOUNCE_SECONDS,
        *,
        on_error: Optional[Callable[[Hashable, Exception], Any]] = None,
    ):
        self.delay = delay
        self.on_error = on_error
        self._lock = threading.Lock()
        self._pending: dict[Hashable, tuple[threading.Timer, Callable[[], Any]]] = {}

    def submit(self, key: Hashable, fn: Callable[..., Any], *args, **kwargs) -> None:
        """Schedule fn(*args, **kwargs); replaces any pending write for `key`."""
        def call() -> Any:
            return fn(*args, **kwargs)

        timer = threading.Timer(self.delay, self._fire, args=(key,))
        timer.daemon = True
        with self._lock:
            previous = self._pending.pop(key, None)
            if previous is not None:
                previous[0].cancel()
            self._pending[key] = (timer, call)
        timer.start()

    def _fire(self, key: Hashable) -> None:
        with self._lock:
            entry = self._pending.pop(key, None)
        if entry is None:
            return
        try:
            entry[1]()
        except Exception as e:
            _log.exception("Debounced write for %r failed", key)
            if self.on_error is not None:
                self.on_error(key, e)

    def pending_keys(self) -> list[Hashable]:
        with self._lock:
            return list(self._pending)

    def flush(self) -> None:
        """Run every pending write immediately, in submit order. Errors propagate."""
        with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()
        for timer, call in entries:
            timer.cancel()
            call()

    def cancel(self) -> None:
        with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()
        for timer, _ in entries:
            timer.cancel()
