"""Application lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.namespace import MarkdownRenderer, NamespaceService
from storage.runtime import build_storage_container

logger = logging.getLogger(__name__)


def build_namespace_service(settings) -> NamespaceService:
    """Wire storage, renderer and defaults from settings."""
    container = build_storage_container(
        db_path=settings.storage.db_path,
        strategy=settings.storage.strategy,
    )
    return NamespaceService(
        container.entry_repo(),
        MarkdownRenderer(settings.render.extensions),
        default_file_content=settings.documents.default_file_content,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown."""
    settings = app.state.settings
    logging.basicConfig(
        level=settings.logging.numeric_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # tests may inject a prebuilt service
    service = getattr(app.state, "namespace", None) or build_namespace_service(settings)
    service.ensure_root()
    app.state.namespace = service
    logger.info(
        "Document store ready (strategy=%s, db=%s)",
        settings.storage.strategy,
        settings.storage.db_path,
    )

    try:
        yield
    finally:
        try:
            service.repo.close()
        except Exception as e:
            logger.warning("Storage cleanup error: %s", e)
        app.state.namespace = None
