"""FastAPI application serving a :class:`RingBufferSink`."""

from fastapi import FastAPI

from logwire.cors import CORSHeadersMiddleware
from logwire.routers import logs
from logwire.services.log_handler import RingBufferSink


def create_app(sink: RingBufferSink) -> FastAPI:
    app = FastAPI(
        title="logwire",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    # Shared with the logging side, not copied.
    app.state.sink = sink

    app.add_middleware(CORSHeadersMiddleware)
    app.include_router(logs.router)
    return app
