"""Curation event models for the append-only audit log."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CurationEventType(str, Enum):
    """Supported curation event types."""

    VOTE_CAST = "vote_cast"
    DECISION_REACHED = "decision_reached"
    DECISION_APPLIED = "decision_applied"
    DECISION_APPLY_FAILED = "decision_apply_failed"
    WORK_COLLECTED = "work_collected"
    WORK_REMOVED = "work_removed"
    SESSION_DECISION_RECORDED = "session_decision_recorded"


class CurationEvent(BaseModel):
    """Append-only curation event entry."""

    event_id: str
    timestamp: str
    actor: Optional[str] = None
    event_type: CurationEventType
    subject_id: str
    references: List[str] = Field(default_factory=list)
    summary: str
