from enum import Enum
from typing import Any, Callable, Dict, List

from gymbooking.core.logger import logger


class SessionSignal(str, Enum):
    RECOVERY_ERROR = "password-reset-error"
    OPEN_PASSWORD_RESET = "open-password-reset"


Listener = Callable[[SessionSignal, Dict[str, Any]], None]


class SessionEvents:
    """
    Observer the embedding page subscribes to for auth signals
    (recovery link errors, "open the password change form").
    """

    def __init__(self):
        self._listeners: Dict[SessionSignal, List[Listener]] = {signal: [] for signal in SessionSignal}

    def subscribe(self, signal: SessionSignal, listener: Listener) -> Callable[[], None]:
        self._listeners[signal].append(listener)
        return lambda: self.unsubscribe(signal, listener)

    def unsubscribe(self, signal: SessionSignal, listener: Listener) -> None:
        if listener in self._listeners[signal]:
            self._listeners[signal].remove(listener)

    def emit(self, signal: SessionSignal, **detail: Any) -> None:
        logger.info(f"📣 Emitting {signal.value} to {len(self._listeners[signal])} listener(s)")
        for listener in list(self._listeners[signal]):
            try:
                listener(signal, detail)
            except Exception as e:
                # One broken listener must not hide the signal from the rest
                logger.error(f"❌ Listener for {signal.value} failed: {e}")
