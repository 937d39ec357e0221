# storefront/services/watchdog.py
import threading
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


class RecurringTimer:
    """
    setInterval on top of threading.Timer: re-arms after every tick until
    cancelled. Daemon threads, so a forgotten timer never blocks shutdown.
    """

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self._cancelled = threading.Event()
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._arm()

    def _arm(self) -> None:
        with self._lock:
            if self._cancelled.is_set():
                return
            self._timer = threading.Timer(self.interval, self._run)
            self._timer.daemon = True
            self._timer.start()

    def _run(self) -> None:
        if self._cancelled.is_set():
            return
        try:
            self.callback()
        finally:
            self._arm()

    def cancel(self) -> None:
        with self._lock:
            self._cancelled.set()
            if self._timer:
                self._timer.cancel()
