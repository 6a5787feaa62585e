"""Planification de rappels annulables.

L'interface reprend ``after`` / ``after_cancel`` de Tkinter : une fenêtre
``tk.Tk`` peut donc servir directement de planificateur.
"""

from __future__ import annotations

import threading
from itertools import count
from typing import Any, Callable, Protocol


class Scheduler(Protocol):
    def after(self, delay_ms: int, callback: Callable[[], None]) -> Any: ...

    def after_cancel(self, handle: Any) -> None: ...


class ThreadScheduler:
    """Planificateur basé sur ``threading.Timer`` pour un usage hors interface."""

    def __init__(self) -> None:
        self._timers: dict[int, threading.Timer] = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    def after(self, delay_ms: int, callback: Callable[[], None]) -> int:
        handle = next(self._ids)

        def run() -> None:
            with self._lock:
                if self._timers.pop(handle, None) is None:
                    return
            callback()

        timer = threading.Timer(delay_ms / 1000, run)
        timer.daemon = True
        with self._lock:
            self._timers[handle] = timer
        timer.start()
        return handle

    def after_cancel(self, handle: int) -> None:
        with self._lock:
            timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
