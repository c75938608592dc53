"""Request payloads accepted by the registry services."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field

from curation.collaboration.models import (
    CollaborationType,
    Participant,
    VotingRules,
    Workspace,
)
from curation.collections.models import (
    CollectionCollaborator,
    CollectionCriteria,
    CollectionStatus,
    CollectionType,
    Visibility,
)
from curation.sessions.models import SessionCollaborator, SessionCriteria
from curation.storage import RecordModel


class CollaborationDraft(RecordModel):
    title: str
    description: str = ""
    type: CollaborationType = CollaborationType.CURATION
    participants: List[Participant] = Field(default_factory=list)
    voting_rules: VotingRules
    workspace: Optional[Workspace] = None


class VoteRequest(RecordModel):
    work_id: str
    curator_id: str
    # Checked by the voting service so that bad values map to a 400.
    vote: str
    reason: Optional[str] = None


class CollectionDraft(RecordModel):
    title: str
    description: str = ""
    type: CollectionType = CollectionType.PERMANENT
    status: CollectionStatus = CollectionStatus.DRAFT
    owner_id: str
    organization_id: Optional[str] = None
    criteria: CollectionCriteria = Field(default_factory=CollectionCriteria)
    visibility: Visibility = Visibility.PRIVATE
    collaborators: List[CollectionCollaborator] = Field(default_factory=list)


class AddWorkRequest(RecordModel):
    work_id: Optional[str] = None
    curator_id: Optional[str] = None
    position: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None


class SessionDraft(RecordModel):
    curator_id: str
    title: str
    goal: str = ""
    target_count: Optional[int] = None
    criteria: SessionCriteria = Field(default_factory=SessionCriteria)
    collaborators: List[SessionCollaborator] = Field(default_factory=list)
    agent_id: Optional[str] = None
    auto_populate: bool = True


class SessionDecisionRequest(RecordModel):
    work_id: str
    decision: str
    curator_id: Optional[str] = None
    reason: Optional[str] = None
    time_spent: Optional[float] = None


class CurationActionRequest(RecordModel):
    work_id: str
    action: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
