"""Markdown document namespace endpoints."""

import asyncio
from collections.abc import Callable
from typing import Annotated, Any, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, PlainTextResponse

from backend.web.core.dependencies import get_namespace
from backend.web.models.requests import MoveRequest, SaveContentRequest
from core.namespace import (
    AlreadyExistsError,
    InvalidOperationError,
    NamespaceError,
    NamespaceService,
    NotFoundError,
    StorageFailureError,
    paths,
)

router = APIRouter(tags=["documents"])

T = TypeVar("T")

Namespace = Annotated[NamespaceService, Depends(get_namespace)]

_STATUS_BY_ERROR: dict[type[NamespaceError], int] = {
    NotFoundError: 404,
    AlreadyExistsError: 409,
    InvalidOperationError: 400,
    StorageFailureError: 503,
}


def _status_for(exc: NamespaceError) -> int:
    for error_type, status in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 400


async def _run(fn: Callable[..., T], *args: Any) -> T:
    """Run a blocking namespace call off the event loop and map domain errors."""
    try:
        return await asyncio.to_thread(fn, *args)
    except NamespaceError as e:
        raise HTTPException(_status_for(e), e.message) from e


@router.get("/list")
async def list_entries(namespace: Namespace, path: str = Query(default="/")) -> dict[str, Any]:
    """List direct children of a directory."""
    children = await _run(namespace.list_children, path)
    return {"path": paths.normalize(path), "entries": [c.to_dict() for c in children]}


@router.get("/view", response_class=HTMLResponse)
async def view_markdown(namespace: Namespace, path: str = Query(...)) -> HTMLResponse:
    """Render a markdown file to HTML."""
    return HTMLResponse(await _run(namespace.render_view, path))


@router.get("/raw", response_class=PlainTextResponse)
async def raw_markdown(namespace: Namespace, path: str = Query(...)) -> PlainTextResponse:
    """Return the markdown source of a file."""
    return PlainTextResponse(await _run(namespace.read_content, path))


@router.post("/save")
async def save_markdown(payload: SaveContentRequest, namespace: Namespace) -> dict[str, Any]:
    message = await _run(namespace.save_content, payload.path, payload.content)
    return {"ok": True, "message": message}


@router.post("/create-file")
async def create_file(namespace: Namespace, path: str = Query(...)) -> dict[str, Any]:
    message = await _run(namespace.create_file, path)
    return {"ok": True, "message": message}


@router.post("/create-directory")
async def create_directory(namespace: Namespace, path: str = Query(...)) -> dict[str, Any]:
    message = await _run(namespace.create_directory, path)
    return {"ok": True, "message": message}


@router.post("/move")
async def move_entry(payload: MoveRequest, namespace: Namespace) -> dict[str, Any]:
    """Move a file or directory (with its subtree) into another directory."""
    message = await _run(namespace.move, payload.source, payload.destination)
    return {"ok": True, "message": message}


@router.delete("/delete")
async def delete_entry(namespace: Namespace, path: str = Query(...)) -> dict[str, Any]:
    """Delete a file, or a directory with everything below it."""
    message = await _run(namespace.delete, path)
    return {"ok": True, "message": message}
