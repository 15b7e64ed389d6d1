"""In-memory ring buffer log sink served by the log server."""

import logging
import threading

from logwire.config import Settings
from logwire.levels import Severity
from logwire.schemas import LogItem
from logwire.services.ring_buffer import RingBuffer

# Loggers belonging to the HTTP exposure layer. Keeping their records would
# let every poll of /logs write new entries into the buffer it reads.
EXPOSURE_LOGGERS = ("logwire.server", "uvicorn", "starlette", "fastapi", "httpx", "httpcore")


def is_exposure_logger(name: str) -> bool:
    return any(name == prefix or name.startswith(prefix + ".") for prefix in EXPOSURE_LOGGERS)


class RingBufferSink(logging.Handler):
    """Keeps the last ``settings.capacity`` accepted log records in memory.

    The same instance is shared by whoever registers it as a logging handler
    and by the HTTP app serving :meth:`snapshot`.
    """

    def __init__(self, settings: Settings):
        super().__init__(level=settings.level.python_level)
        self.settings = settings
        self._buffer: RingBuffer[LogItem] = RingBuffer(settings.capacity)
        self._lock = threading.Lock()

    @property
    def minimum(self) -> Severity:
        return self.settings.level

    def enabled(self, level: Severity) -> bool:
        return level.at_least(self.settings.level)

    def record(self, level: Severity, module: str, message: str) -> None:
        """Store one log item unless it is filtered out by severity or origin."""
        if not self.enabled(level) or is_exposure_logger(module):
            return
        item = LogItem(level=level.label, module=module, message=message)
        with self._lock:
            self._buffer.push(item)

    def snapshot(self) -> list[LogItem]:
        """Return a copy of the buffered items, oldest first."""
        with self._lock:
            return self._buffer.snapshot()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        self.record(Severity.from_python_level(record.levelno), record.name, message)

    def flush(self) -> None:
        # Nothing leaves the process.
        pass
