"""Read-only routes exposing the buffered log items."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from logwire.schemas import LogItem
from logwire.services.log_handler import RingBufferSink

router = APIRouter(tags=["logs"])


def get_sink(request: Request) -> RingBufferSink:
    return request.app.state.sink


@router.get("/", response_class=PlainTextResponse)
async def index():
    return "Logserver online"


@router.get("/logs", response_model=list[LogItem])
async def get_logs(sink: RingBufferSink = Depends(get_sink)):
    """Return every buffered log item, oldest first."""
    return sink.snapshot()
