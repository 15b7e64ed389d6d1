"""Wire settings, sink, logger registration and HTTP server together."""

import logging
from pathlib import Path

from logwire.server import LogServer

log = logging.getLogger("logwire")


def bootstrap(
    directory: str | Path,
    filename: str,
    logger: logging.Logger | None = None,
) -> LogServer:
    """Load settings, register the sink on *logger* and start serving it.

    Raises :class:`~logwire.config.ConfigurationError` before anything is
    created when the settings are incomplete, and
    :class:`~logwire.server.ServerStartError` when the server cannot bind.
    """
    server = LogServer.from_file(directory, filename)
    server.init_logger(logger)
    server.start_server()
    log.info("Retaining the last %d log records at level %s and above",
             server.settings.capacity, server.settings.level.label)
    return server
