"""FastAPI dependency injection functions."""

from fastapi import FastAPI, HTTPException, Request

from core.namespace import NamespaceService


async def get_app(request: Request) -> FastAPI:
    """Get FastAPI app instance from request."""
    return request.app


async def get_namespace(request: Request) -> NamespaceService:
    """Namespace service bound to the app's storage."""
    service = getattr(request.app.state, "namespace", None)
    if service is None:
        raise HTTPException(503, "Document store is not initialized")
    return service
