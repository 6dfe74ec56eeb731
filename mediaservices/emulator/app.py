"""Local emulator of the media services REST surface."""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from mediaservices.infrastructure import InMemoryEntityStore

from . import routes


def create_app(store: InMemoryEntityStore | None = None) -> FastAPI:
    app = FastAPI(title="Media Services Emulator", version="0.1.0")
    app.state.store = store or InMemoryEntityStore()

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse({"message": "Media Services Emulator", "docs": "/docs"})

    app.include_router(routes.router)
    return app
