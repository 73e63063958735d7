"""ASGI entry point and server runner."""

import logging

import uvicorn

from .api import create_app
from .config import settings

app = create_app(settings)


def run() -> None:
    """Serve ``app`` with uvicorn on the configured port."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)
