"""Pydantic request models for the dok web API."""

from pydantic import BaseModel


class SaveContentRequest(BaseModel):
    path: str
    content: str


class MoveRequest(BaseModel):
    source: str
    destination: str
