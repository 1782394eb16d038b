from collections.abc import Callable

from fastapi import FastAPI

from lotus import __version__
from lotus.api.routes import events
from lotus.core.channel import EventSender


def create_app(sender: EventSender, on_fatal: Callable[[Exception], None]) -> FastAPI:
    """Build the collector application bound to one channel sender."""
    app = FastAPI(
        title="Lotus Event Collector",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.sender = sender
    app.state.on_fatal = on_fatal

    app.include_router(events.router, tags=["Events"])
    return app
