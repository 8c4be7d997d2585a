"""Error envelope returned by the proxy routes."""

from typing import Any

from pydantic import BaseModel


class ErrorEnvelope(BaseModel):
    error: str
    details: Any = None

