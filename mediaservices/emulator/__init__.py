"""In-process emulator of the REST API, backed by the in-memory store."""

from .app import create_app

__all__ = ["create_app"]
