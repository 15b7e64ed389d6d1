"""Log server: a ring buffer sink plus a uvicorn thread exposing it over HTTP."""

import logging
import threading
import time
from pathlib import Path

import uvicorn

from logwire.app import create_app
from logwire.config import Settings, load_settings
from logwire.services.log_handler import RingBufferSink

# Excluded from the sink, see EXPOSURE_LOGGERS.
log = logging.getLogger("logwire.server")

_POLL_INTERVAL = 0.05


class ServerStartError(RuntimeError):
    """The HTTP server thread exited or timed out before accepting connections."""


class LogServer:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.sink = RingBufferSink(settings)
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._error: BaseException | None = None

    @classmethod
    def from_file(cls, directory: str | Path, filename: str) -> "LogServer":
        return cls(load_settings(directory, filename))

    # ------------------------------------------------------------------
    # Logging side
    # ------------------------------------------------------------------
    def init_logger(self, logger: logging.Logger | None = None) -> logging.Logger:
        """Attach the sink to *logger* (the root logger by default).

        The logger's threshold is set to the sink's minimum severity.
        """
        if logger is None:
            logger = logging.getLogger()
        if self.sink not in logger.handlers:
            logger.addHandler(self.sink)
        logger.setLevel(self.sink.minimum.python_level)
        return logger

    # ------------------------------------------------------------------
    # HTTP side
    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def bound_address(self) -> tuple[str, int] | None:
        """Host and port actually bound, or None while not serving."""
        if self._server is None or not self._server.started:
            return None
        for server in self._server.servers:
            for sock in server.sockets:
                host, port = sock.getsockname()[:2]
                return host, port
        return None

    @property
    def url(self) -> str | None:
        address = self.bound_address
        if address is None:
            return None
        host, port = address
        if ":" in host:
            host = f"[{host}]"
        return f"http://{host}:{port}"

    def start_server(self, timeout: float = 5.0) -> tuple[str, int]:
        """Serve the sink on a background thread and wait until it accepts connections.

        Returns the bound ``(host, port)``. Raises :class:`ServerStartError`
        if the server cannot bind or does not come up within *timeout* seconds.
        """
        if self._thread is not None:
            raise RuntimeError("Log server already started")

        config = uvicorn.Config(
            create_app(self.sink),
            host=self.settings.address,
            port=self.settings.port,
            log_config=None,  # leave the host application's logging alone
        )
        self._server = uvicorn.Server(config)
        self._error = None
        self._thread = threading.Thread(target=self._serve, name="logwire-server", daemon=True)
        self._thread.start()

        deadline = time.monotonic() + timeout
        while not self._server.started:
            if not self._thread.is_alive():
                self._thread = None
                raise ServerStartError(
                    f"Log server failed to start on {self.settings.address}:{self.settings.port}"
                ) from self._error
            if time.monotonic() > deadline:
                self.stop()
                # A thread that ignored should_exit is abandoned so start_server() can retry.
                self._thread = None
                self._server = None
                raise ServerStartError(
                    f"Log server did not start within {timeout}s"
                ) from self._error
            time.sleep(_POLL_INTERVAL)

        address = self.bound_address
        log.info("Log server listening on %s:%d", *address)
        return address

    def _serve(self) -> None:
        try:
            self._server.run()
        except (Exception, SystemExit) as exc:
            # uvicorn exits via sys.exit(1) when it cannot bind
            self._error = exc
            log.error("Log server stopped: %r", exc)

    def stop(self, timeout: float = 5.0) -> None:
        """Ask the server to exit and wait for its thread. Safe to call repeatedly."""
        if self._thread is None:
            return
        self._server.should_exit = True
        self._thread.join(timeout)
        if self._thread.is_alive():
            log.warning("Log server thread did not exit within %ss", timeout)
            return
        self._thread = None
        log.info("Log server stopped")
