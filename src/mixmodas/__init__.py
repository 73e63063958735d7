"""Mix Modas catalog and account API."""

from .api import create_app

__all__ = ["create_app"]
