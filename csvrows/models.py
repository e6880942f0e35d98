from __future__ import annotations

from typing import Any, Dict, List
from pydantic import BaseModel, Field


class CsvPayload(BaseModel):
    csv: str


class ParseResponse(BaseModel):
    headers: List[str]
    count: int = Field(default=0, examples=[2])
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    ok: bool = True
