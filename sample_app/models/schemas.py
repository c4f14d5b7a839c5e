from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class WelcomeResponse(BaseModel):
    message: str
    timestamp: str
    version: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: str


class WorkResponse(BaseModel):
    operation: str
    input: int
    result: int
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
    message: str
    timestamp: str
