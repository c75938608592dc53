"""
Collaborative voting: collaborations, vote submission and voting status.
"""
import logging
import time
import uuid
from typing import Any, Dict, List, Optional

from curation.collaboration.applier import DecisionApplier
from curation.collaboration.models import (
    Collaboration,
    CollaborationStatus,
    Decision,
    Outcome,
    Vote,
    VoteValue,
    Workspace,
)
from curation.collaboration.store import CollaborationStore
from curation.collaboration.tally import summarize, tally_decision
from curation.events.event_log import CurationEventLog
from curation.events.models import CurationEventType
from curation.storage import utc_now
from core.requests import CollaborationDraft
from exceptions import InvalidInputError, NotFoundError, PermissionDeniedError
from logging_config import log_debug, log_step_complete, log_step_start

logger = logging.getLogger(__name__)

VALID_VOTES = [value.value for value in VoteValue]


class VotingService:
    """Runs the find-or-create decision / re-tally / apply cycle for votes."""

    def __init__(self, store: CollaborationStore, applier: DecisionApplier,
                 event_log: CurationEventLog, recompute_outcome_on_read: bool = False):
        self.store = store
        self.applier = applier
        self.event_log = event_log
        self.recompute_outcome_on_read = recompute_outcome_on_read

    def create_collaboration(self, draft: CollaborationDraft) -> Dict[str, Any]:
        now = utc_now()
        collaboration = Collaboration(
            id=uuid.uuid4().hex,
            title=draft.title,
            description=draft.description,
            type=draft.type,
            participants=draft.participants,
            voting_rules=draft.voting_rules,
            workspace=draft.workspace or Workspace(),
            decisions=[],
            status=CollaborationStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )
        with self.store.mutate() as collaborations:
            collaborations.append(collaboration)

        log_step_complete(logger, "VotingService", "create_collaboration", "Collaboration created", {
            "collaboration_id": collaboration.id,
            "participants": len(collaboration.participants),
            "mechanism": collaboration.voting_rules.mechanism,
        })
        return {
            "success": True,
            "collaboration": collaboration.to_json_dict(),
            "message": f"Collaboration created with {len(collaboration.participants)} participants",
        }

    def list_collaborations(self, curator_id: Optional[str] = None, type: Optional[str] = None,
                            status: Optional[str] = None) -> Dict[str, Any]:
        self.store.ensure_exists()
        collaborations = self.store.read_all()

        if curator_id:
            collaborations = [
                c for c in collaborations
                if any(p.curator_id == curator_id and p.active for p in c.participants)
            ]
        if type:
            collaborations = [c for c in collaborations if c.type == type]
        if status:
            collaborations = [c for c in collaborations if c.status == status]

        collaborations.sort(key=lambda c: c.updated_at, reverse=True)

        return {
            "success": True,
            "collaborations": [c.to_json_dict() for c in collaborations],
            "meta": {
                "total": len(collaborations),
                "active": sum(1 for c in collaborations if c.status == CollaborationStatus.ACTIVE),
                "completed": sum(1 for c in collaborations if c.status == CollaborationStatus.COMPLETED),
            },
        }

    def _find(self, collaborations: List[Collaboration], collaboration_id: str) -> Collaboration:
        for collaboration in collaborations:
            if collaboration.id == collaboration_id:
                return collaboration
        raise NotFoundError("Collaboration not found")

    def submit_vote(self, collaboration_id: str, work_id: str, curator_id: str, vote: str,
                    reason: Optional[str] = None) -> Dict[str, Any]:
        """Record or overwrite one curator's vote and re-tally the decision."""
        if vote not in VALID_VOTES:
            raise InvalidInputError(f"Invalid vote. Must be one of: {', '.join(VALID_VOTES)}")

        start_time = time.time()
        log_step_start(logger, "VotingService", "submit_vote", "Submitting vote", {
            "collaboration_id": collaboration_id,
            "work_id": work_id,
            "curator_id": curator_id,
        })

        with self.store.mutate() as collaborations:
            collaboration = self._find(collaborations, collaboration_id)

            participant = collaboration.participant(curator_id)
            if participant is None or not participant.active:
                raise PermissionDeniedError("Not an active participant in this collaboration")

            decision = collaboration.decision_for(work_id)
            if decision is None:
                decision = Decision(work_id=work_id)
                collaboration.decisions.append(decision)

            new_vote = Vote(curator_id=curator_id, vote=VoteValue(vote), reason=reason, timestamp=utc_now())
            decision.record_vote(new_vote)

            outcome = tally_decision(decision, collaboration)
            decision.outcome = outcome

            if outcome != Outcome.PENDING:
                decision.decided_at = utc_now()
                # Runs on every accepted tally, not only the first one.
                if outcome == Outcome.ACCEPTED:
                    self.applier.apply(work_id, collaboration, curator_id)

            collaboration.updated_at = utc_now()
            vote_summary = summarize(decision, collaboration)

        self.event_log.record(
            CurationEventType.VOTE_CAST,
            subject_id=work_id,
            summary=f"Vote '{vote}' recorded",
            actor=curator_id,
            references=[collaboration_id],
        )
        if outcome != Outcome.PENDING:
            self.event_log.record(
                CurationEventType.DECISION_REACHED,
                subject_id=work_id,
                summary=f"Decision {outcome.value}",
                actor=curator_id,
                references=[collaboration_id],
            )

        log_step_complete(logger, "VotingService", "submit_vote", "Vote recorded", {
            "collaboration_id": collaboration_id,
            "work_id": work_id,
            "outcome": outcome.value,
            "votes": vote_summary.voted,
        }, duration_ms=(time.time() - start_time) * 1000)

        return {
            "success": True,
            "vote": {
                "workId": work_id,
                "curatorId": curator_id,
                "vote": vote,
                "timestamp": new_vote.timestamp,
            },
            "decision": {
                "outcome": outcome.value,
                "voteSummary": vote_summary.to_json_dict(),
                "decidedAt": decision.decided_at,
            },
        }

    def _reported_outcome(self, decision: Decision, collaboration: Collaboration) -> Outcome:
        if self.recompute_outcome_on_read:
            return tally_decision(decision, collaboration)
        return Outcome(decision.outcome)

    def voting_status(self, collaboration_id: str, work_id: Optional[str] = None) -> Dict[str, Any]:
        """Status of one work's decision, or of every decision in the collaboration."""
        collaboration = self._find(self.store.read_all(), collaboration_id)

        if work_id:
            decision = collaboration.decision_for(work_id)
            if decision is None:
                return {
                    "success": True,
                    "workId": work_id,
                    "status": "no_votes",
                    "votes": [],
                    "outcome": Outcome.PENDING.value,
                }
            return {
                "success": True,
                "workId": work_id,
                "votes": [v.to_json_dict() for v in decision.votes],
                "outcome": self._reported_outcome(decision, collaboration).value,
                "decidedAt": decision.decided_at,
                "summary": summarize(decision, collaboration).to_json_dict(),
            }

        decisions = []
        for decision in collaboration.decisions:
            payload = decision.to_json_dict()
            payload["outcome"] = self._reported_outcome(decision, collaboration).value
            payload["summary"] = summarize(decision, collaboration).to_json_dict()
            decisions.append(payload)

        log_debug(logger, "Voting status computed", "VotingService", {
            "collaboration_id": collaboration_id,
            "decisions": len(decisions),
        })

        return {
            "success": True,
            "collaborationId": collaboration_id,
            "decisions": decisions,
            "stats": {
                "total": len(decisions),
                "accepted": sum(1 for d in decisions if d["outcome"] == Outcome.ACCEPTED.value),
                "rejected": sum(1 for d in decisions if d["outcome"] == Outcome.REJECTED.value),
                "pending": sum(1 for d in decisions if d["outcome"] == Outcome.PENDING.value),
            },
        }
