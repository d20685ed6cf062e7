"""dok Web Backend - FastAPI Application."""

import os

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.web.core.config import DEFAULT_PORT, WORKSPACE_ROOT
from backend.web.core.lifespan import lifespan
from backend.web.routers import documents
from config.loader import load_settings
from config.schema import DokSettings


def create_app(settings: DokSettings | None = None) -> FastAPI:
    """Build the application; settings are loaded from the workspace when not given."""
    if settings is None:
        settings = load_settings(workspace_root=WORKSPACE_ROOT)
    app = FastAPI(title="dok Markdown Store", lifespan=lifespan)
    app.state.settings = settings
    app.state.namespace = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(documents.router)
    return app


app = create_app()


def _resolve_port(settings: DokSettings) -> int:
    """Resolve backend port: DOK_PORT (via settings) > PORT > settings default."""
    if os.environ.get("DOK_PORT"):
        return settings.server.port
    port = os.environ.get("PORT")
    if port:
        return int(port)
    return settings.server.port or DEFAULT_PORT


if __name__ == "__main__":
    settings = load_settings(workspace_root=WORKSPACE_ROOT)
    # @@@module-launch-target - Package-qualified target keeps module launch (`python -m backend.web.main`) import-safe.
    uvicorn.run("backend.web.main:app", host=settings.server.host, port=_resolve_port(settings), reload=True)
