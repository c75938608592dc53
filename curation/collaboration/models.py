"""Collaboration, participant, voting-rule and decision records."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from curation.storage import RecordModel


class VoteValue(str, Enum):
    """Allowed values of a single curator's vote."""

    ACCEPT = "accept"
    REJECT = "reject"
    ABSTAIN = "abstain"


class Outcome(str, Enum):
    """Computed result of a decision."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    PENDING = "pending"


class VotingMechanism(str, Enum):
    UNANIMOUS = "unanimous"
    MAJORITY = "majority"
    WEIGHTED = "weighted"
    VETO = "veto"


class ParticipantRole(str, Enum):
    LEAD = "lead"
    SPECIALIST = "specialist"
    REVIEWER = "reviewer"
    ADVISOR = "advisor"


class CollaborationType(str, Enum):
    CURATION = "curation"
    EXHIBITION = "exhibition"
    RESEARCH = "research"
    ACQUISITION = "acquisition"


class CollaborationStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Participant(RecordModel):
    curator_id: str
    name: str
    role: ParticipantRole = ParticipantRole.REVIEWER
    expertise: List[str] = Field(default_factory=list)
    joined_at: Optional[str] = None
    active: bool = True


class VotingRules(RecordModel):
    """How votes are counted once quorum is reached."""

    mechanism: VotingMechanism
    quorum: float = Field(ge=0, le=1)
    veto_rights: List[str] = Field(default_factory=list)
    # None means "no weight map configured", which is distinct from an empty map.
    weightings: Optional[Dict[str, float]] = None


class Vote(RecordModel):
    """One curator's current vote on one work; re-voting replaces it."""

    curator_id: str
    vote: VoteValue
    reason: Optional[str] = None
    timestamp: str


class Decision(RecordModel):
    """All votes cast on one work within one collaboration."""

    work_id: str
    votes: List[Vote] = Field(default_factory=list)
    outcome: Outcome = Outcome.PENDING
    decided_at: Optional[str] = None

    def vote_of(self, curator_id: str) -> Optional[Vote]:
        return next((vote for vote in self.votes if vote.curator_id == curator_id), None)

    def record_vote(self, vote: Vote) -> None:
        """Overwrite the curator's prior vote in place, or append a new one."""
        for index, existing in enumerate(self.votes):
            if existing.curator_id == vote.curator_id:
                self.votes[index] = vote
                return
        self.votes.append(vote)


class SharedNote(RecordModel):
    id: str
    author: str
    content: str
    timestamp: str
    work_id: Optional[str] = None


class Workspace(RecordModel):
    session_id: Optional[str] = None
    collection_id: Optional[str] = None
    shared_notes: List[SharedNote] = Field(default_factory=list)


class Collaboration(RecordModel):
    """A multi-curator voting group."""

    id: str
    title: str
    description: str = ""
    type: CollaborationType = CollaborationType.CURATION
    participants: List[Participant] = Field(default_factory=list)
    voting_rules: VotingRules
    workspace: Workspace = Field(default_factory=Workspace)
    decisions: List[Decision] = Field(default_factory=list)
    status: CollaborationStatus = CollaborationStatus.ACTIVE
    created_at: str
    updated_at: str
    completed_at: Optional[str] = None

    @property
    def active_participants(self) -> List[Participant]:
        return [participant for participant in self.participants if participant.active]

    def participant(self, curator_id: str) -> Optional[Participant]:
        return next((p for p in self.participants if p.curator_id == curator_id), None)

    def decision_for(self, work_id: str) -> Optional[Decision]:
        return next((d for d in self.decisions if d.work_id == work_id), None)


class NotVotedEntry(RecordModel):
    curator_id: str
    name: str


class VoteSummary(RecordModel):
    """Participation and vote counts for one decision."""

    total_participants: int
    voted: int
    not_voted: int
    not_voted_list: List[NotVotedEntry] = Field(default_factory=list)
    accepts: int
    rejects: int
    abstains: int
    quorum_met: bool
