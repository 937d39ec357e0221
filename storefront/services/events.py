# storefront/services/events.py
from typing import Any, Callable, List

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class Signal:
    """Named in-process event, receivers are called synchronously in connect order."""

    def __init__(self, name: str):
        self.name = name
        self._receivers: List[Callable[..., Any]] = []

    def connect(self, receiver: Callable[..., Any]) -> Callable[[], None]:
        self._receivers.append(receiver)

        def disconnect() -> None:
            if receiver in self._receivers:
                self._receivers.remove(receiver)

        return disconnect

    def send(self, **payload: Any) -> None:
        logger.debug(f"Signal {self.name} -> {len(self._receivers)} receivers")
        for receiver in list(self._receivers):
            receiver(**payload)
