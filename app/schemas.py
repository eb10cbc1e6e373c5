"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from services.admin import ActionResult, AdminAction
from services.live import ListenerState


class PipelineState(str, Enum):
    """Lifecycle of the fetch, normalize, render sequence."""

    pending = "pending"
    rendered = "rendered"
    failed = "failed"


class PipelineStatus(BaseModel):
    """Outcome of the most recent refresh."""

    state: PipelineState = PipelineState.pending
    reason: Optional[str] = None
    sample_count: int = Field(default=0, ge=0)
    skipped_count: int = Field(default=0, ge=0)
    revision: Optional[int] = None
    refreshed_at: Optional[datetime] = None


class SeriesPayload(BaseModel):
    """Index-aligned chart categories and values."""

    categories: List[str] = Field(default_factory=list)
    values: List[float] = Field(default_factory=list)


class ChartResponse(BaseModel):
    """The chart currently on display."""

    revision: int = Field(..., ge=1)
    series: SeriesPayload
    options: Dict[str, Any]


class LiveValueResponse(BaseModel):
    value: Optional[str] = None
    updated_at: Optional[datetime] = None
    message_count: int = Field(default=0, ge=0)
    state: ListenerState


class ActionResultResponse(BaseModel):
    """Result of a destructive device action."""

    action: AdminAction
    succeeded: bool
    status_code: Optional[int] = None
    detail: str = ""

    @classmethod
    def from_result(cls, result: ActionResult) -> "ActionResultResponse":
        return cls(
            action=result.action,
            succeeded=result.succeeded,
            status_code=result.status_code,
            detail=result.detail,
        )
