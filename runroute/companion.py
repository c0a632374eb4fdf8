"""Run state updates for a paired companion device (watch, dashboard)."""

import queue
import time
from typing import Callable, Optional

from .logger import Logger, quiet_logger


class MessageChannel:
    """Base class for a message transport with an explicit lifecycle.

    `send()` is only valid between `open()` and `close()`; a closed
    channel drops messages and reports it by returning False.
    """

    def __init__(self):
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self):
        self._open = True

    def close(self):
        self._open = False

    def send(self, message: dict) -> bool:
        if not self._open:
            return False
        self._deliver(message)
        return True

    def _deliver(self, message: dict):
        raise NotImplementedError

    def __enter__(self) -> "MessageChannel":
        self.open()
        return self

    def __exit__(self, *exc):
        self.close()


class QueueChannel(MessageChannel):
    """In-process channel; the receiving side reads from `messages`"""

    def __init__(self, maxsize: int = 0):
        super().__init__()
        self.messages: queue.Queue = queue.Queue(maxsize)

    def _deliver(self, message: dict):
        try:
            self.messages.put_nowait(message)
        except queue.Full:
            # Drop the oldest update; the newest state matters most
            self.messages.get_nowait()
            self.messages.put_nowait(message)

    def drain(self) -> list[dict]:
        items = []
        while True:
            try:
                items.append(self.messages.get_nowait())
            except queue.Empty:
                return items


class CallbackChannel(MessageChannel):
    """Hands each message to a function"""

    def __init__(self, callback: Callable[[dict], None]):
        super().__init__()
        self.callback = callback

    def _deliver(self, message: dict):
        self.callback(message)


class CompanionLink:
    """Builds companion messages and sends them when the channel is open"""

    def __init__(self, channel: MessageChannel, clock: Callable[[], float] = time.time,
                 logger: Optional[Logger] = None):
        self.channel = channel
        self.clock = clock
        self.logger = logger or quiet_logger()

    def send_run_state(self, is_running: bool, distance: float, elapsed_time: float,
                       current_pace: float, pace_status: str,
                       target_distance: float, target_time: float) -> bool:
        message = {
            "isRunning": is_running,
            "distance": distance,
            "elapsedTime": elapsed_time,
            "currentPace": current_pace,
            "paceStatus": pace_status,
            "targetDistance": target_distance,
            "targetTime": target_time,
            "timestamp": self.clock(),
        }
        return self._send(message)

    def send_haptic(self, kind: str) -> bool:
        return self._send({"haptic": kind})

    def _send(self, message: dict) -> bool:
        if not self.channel.is_open:
            return False
        sent = self.channel.send(message)
        if not sent:
            self.logger.log("Companion message dropped", {"keys": sorted(message)})
        return sent
