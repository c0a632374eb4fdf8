"""Audio/Text-to-speech module for Runroute."""

import queue
import subprocess
import threading
from typing import Optional, Callable, Sequence


class Audio:
    """Text-to-speech with a single speaking thread.

    Every utterance goes through one worker, so two components can never
    talk over each other. `speak(text)` interrupts whatever is playing and
    drops anything queued; `speak(text, interrupt=False)` waits its turn.
    Falls back to printing when espeak is not installed.
    """

    callback: Optional[Callable[[str], None]] = None  # Class-level callback for observers

    @classmethod
    def set_callback(cls, callback: Optional[Callable[[str], None]]):
        """Set callback function for audio events"""
        cls.callback = callback

    def __init__(self, command: Sequence[str] = ("espeak", "-s", "150"), timeout: float = 30):
        self.command = list(command)
        self.timeout = timeout
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._generation = 0
        self._proc: Optional[subprocess.Popen] = None
        self._worker = threading.Thread(target=self._run, daemon=True)
        self._worker.start()

    def speak(self, text: str, interrupt: bool = True):
        """Queue text for speech, optionally cutting off the current utterance"""
        if Audio.callback:
            Audio.callback(text)
        with self._lock:
            if interrupt:
                self._cancel_locked()
            self._queue.put((self._generation, text))

    def stop(self):
        """Silence current speech and discard anything queued"""
        with self._lock:
            self._cancel_locked()

    def close(self, wait: bool = False):
        """Shut the worker down, letting queued speech finish when `wait` is set"""
        if not wait:
            self.stop()
        self._queue.put(None)
        self._worker.join(timeout=self.timeout if wait else 2)

    def _cancel_locked(self):
        self._generation += 1
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        if self._proc and self._proc.poll() is None:
            self._proc.terminate()

    def _run(self):
        while True:
            item = self._queue.get()
            if item is None:
                return
            generation, text = item
            with self._lock:
                if generation != self._generation:
                    continue
                try:
                    self._proc = subprocess.Popen(
                        self.command + [text],
                        stdout=subprocess.DEVNULL,
                        stderr=subprocess.DEVNULL,
                    )
                except (FileNotFoundError, OSError):
                    self._proc = None
                    print(f"[AUDIO] {text}")
                    continue
                proc = self._proc
            try:
                proc.wait(timeout=self.timeout)
            except subprocess.TimeoutExpired:
                proc.kill()
            finally:
                with self._lock:
                    if self._proc is proc:
                        self._proc = None
