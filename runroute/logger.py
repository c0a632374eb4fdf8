"""Logging module for Runroute."""

import json
from datetime import datetime
from typing import Optional, Callable


class Logger:
    """Writes timestamped event lines to stdout and an optional log file.

    Lines look like `[2024-06-15T08:00:00] Route resolved | {"points": 412}`
    so they can be parsed back with a single regex.
    """

    def __init__(self, log_path: Optional[str] = None, callback: Optional[Callable] = None,
                 echo: bool = True, title: str = "Runroute"):
        self.log_path = log_path
        self.callback = callback
        self.echo = echo
        self.title = title
        self.file = None
        if log_path:
            self.file = open(log_path, "a")
            self._write_header()

    def _write_header(self):
        self.file.write(f"\n{'='*60}\n")
        self.file.write(f"{self.title} Log - {datetime.now().isoformat()}\n")
        self.file.write(f"{'='*60}\n\n")
        self.file.flush()

    def log(self, message: str, data: Optional[dict] = None):
        """Log a message with optional structured data"""
        line = f"[{datetime.now().isoformat()}] {message}"
        if data:
            line += f" | {json.dumps(data, default=str)}"
        if self.echo:
            print(line)
        if self.file:
            self.file.write(line + "\n")
            self.file.flush()
        if self.callback:
            self.callback(message, data)

    def close(self):
        if self.file:
            self.file.close()
            self.file = None

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *exc):
        self.close()


def quiet_logger() -> Logger:
    """Logger that records nothing, for components created without one"""
    return Logger(echo=False)
