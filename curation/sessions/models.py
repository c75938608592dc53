"""Single-curator review sessions."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from curation.storage import RecordModel


class SessionStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class SessionDecisionValue(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    MAYBE = "maybe"
    SKIP = "skip"


class SessionCollaboratorRole(str, Enum):
    LEAD = "lead"
    REVIEWER = "reviewer"
    ADVISOR = "advisor"
    OBSERVER = "observer"


class DateRange(RecordModel):
    start: Optional[str] = None
    end: Optional[str] = None


class SessionCriteria(RecordModel):
    themes: Optional[List[str]] = None
    min_quality: Optional[float] = None
    media_types: Optional[List[str]] = None
    date_range: Optional[DateRange] = None
    custom_filters: Optional[Dict[str, Any]] = None


class SessionCollaborator(RecordModel):
    curator_id: str
    role: SessionCollaboratorRole = SessionCollaboratorRole.REVIEWER
    joined_at: Optional[str] = None


class SessionDecision(RecordModel):
    work_id: str
    decision: SessionDecisionValue
    timestamp: str
    time_spent: float = 0
    curator_id: str
    reason: Optional[str] = None


class CurationSession(RecordModel):
    """A curator's queue of works and the accept/reject/maybe lists built from it."""

    id: str
    curator_id: str
    title: str
    goal: str = ""
    status: SessionStatus = SessionStatus.ACTIVE
    target_count: Optional[int] = None
    criteria: SessionCriteria = Field(default_factory=SessionCriteria)

    work_queue: List[str] = Field(default_factory=list)
    reviewed: List[str] = Field(default_factory=list)
    accepted: List[str] = Field(default_factory=list)
    rejected: List[str] = Field(default_factory=list)
    maybe: List[str] = Field(default_factory=list)

    started_at: str
    last_active_at: str
    completed_at: Optional[str] = None
    total_review_time: float = 0
    average_decision_time: float = 0

    collaborators: List[SessionCollaborator] = Field(default_factory=list)
    decisions: List[SessionDecision] = Field(default_factory=list)

    def involves(self, curator_id: str) -> bool:
        return self.curator_id == curator_id or any(
            collaborator.curator_id == curator_id for collaborator in self.collaborators
        )
