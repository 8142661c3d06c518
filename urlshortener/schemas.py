"""Pydantic request/response models for the HTTP API."""

from pydantic import BaseModel


class ShortenRequest(BaseModel):
    """Payload of POST /api/shorten."""
    url: str


class ShortenResponse(BaseModel):
    result: str


class BatchRequestItem(BaseModel):
    correlation_id: str
    original_url: str


class BatchResponseItem(BaseModel):
    correlation_id: str
    short_url: str


class UserURLOut(BaseModel):
    short_url: str
    original_url: str


class ErrorOut(BaseModel):
    detail: str

