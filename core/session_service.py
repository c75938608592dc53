"""
Curation sessions: a single curator triaging a queue of works.
"""
import logging
import uuid
from typing import Any, Dict, Optional

from curation.events.event_log import CurationEventLog
from curation.events.models import CurationEventType
from curation.sessions.models import (
    CurationSession,
    SessionDecision,
    SessionDecisionValue,
    SessionStatus,
)
from curation.sessions.store import SessionStore
from curation.sessions.tracker import apply_decision, filter_works, progress
from curation.storage import utc_now
from curation.works.models import HistoryEntry
from curation.works.store import WorkStore
from core.requests import SessionDraft
from exceptions import InvalidInputError, NotFoundError, RegistryError
from logging_config import log_error, log_step_complete

logger = logging.getLogger(__name__)

VALID_DECISIONS = [value.value for value in SessionDecisionValue]


class SessionService:

    def __init__(self, store: SessionStore, work_store: WorkStore, event_log: CurationEventLog):
        self.store = store
        self.work_store = work_store
        self.event_log = event_log

    def create_session(self, draft: SessionDraft) -> Dict[str, Any]:
        """Create a session, queueing the agent's matching works when asked to."""
        now = utc_now()
        session = CurationSession(
            id=uuid.uuid4().hex,
            curator_id=draft.curator_id,
            title=draft.title,
            goal=draft.goal,
            status=SessionStatus.ACTIVE,
            target_count=draft.target_count,
            criteria=draft.criteria,
            started_at=now,
            last_active_at=now,
            collaborators=draft.collaborators,
        )

        if draft.agent_id and draft.auto_populate:
            try:
                works = self.work_store.list_works(draft.agent_id)
            except RegistryError:
                works = []
            session.work_queue = [work.id for work in filter_works(works, session.criteria)]

        with self.store.mutate() as sessions:
            sessions.append(session)

        log_step_complete(logger, "SessionService", "create_session", "Curation session created", {
            "session_id": session.id,
            "queued": len(session.work_queue),
        })
        return {
            "success": True,
            "session": session.to_json_dict(),
            "message": f"Session created with {len(session.work_queue)} works to review",
        }

    def list_sessions(self, curator_id: Optional[str] = None, status: Optional[str] = None,
                      agent_id: Optional[str] = None) -> Dict[str, Any]:
        self.store.ensure_exists()
        sessions = self.store.read_all()

        if curator_id:
            sessions = [s for s in sessions if s.involves(curator_id)]
        if status:
            sessions = [s for s in sessions if s.status == status]
        if agent_id:
            sessions = [s for s in sessions if any(w.startswith(agent_id) for w in s.work_queue)]

        sessions.sort(key=lambda s: s.last_active_at, reverse=True)

        return {
            "success": True,
            "sessions": [s.to_json_dict() for s in sessions],
            "meta": {
                "total": len(sessions),
                "active": sum(1 for s in sessions if s.status == SessionStatus.ACTIVE),
                "completed": sum(1 for s in sessions if s.status == SessionStatus.COMPLETED),
            },
        }

    @staticmethod
    def _find(sessions, session_id: str) -> CurationSession:
        for session in sessions:
            if session.id == session_id:
                return session
        raise NotFoundError("Session not found")

    def record_decision(self, session_id: str, work_id: str, decision: str,
                        curator_id: Optional[str] = None, reason: Optional[str] = None,
                        time_spent: Optional[float] = None) -> Dict[str, Any]:
        if decision not in VALID_DECISIONS:
            raise InvalidInputError(f"Invalid decision. Must be one of: {', '.join(VALID_DECISIONS)}")

        with self.store.mutate() as sessions:
            session = self._find(sessions, session_id)

            if work_id not in session.work_queue and work_id not in session.reviewed:
                raise InvalidInputError("Work not in session queue")

            record = SessionDecision(
                work_id=work_id,
                decision=SessionDecisionValue(decision),
                timestamp=utc_now(),
                time_spent=time_spent or 0,
                curator_id=curator_id or session.curator_id,
                reason=reason,
            )
            apply_decision(session, record)

            if record.decision == SessionDecisionValue.ACCEPT:
                self._mark_curated(work_id, session, record.curator_id)

        self.event_log.record(
            CurationEventType.SESSION_DECISION_RECORDED,
            subject_id=work_id,
            summary=f"Session decision '{decision}'",
            actor=record.curator_id,
            references=[session_id],
        )

        return {
            "success": True,
            "decision": record.to_json_dict(),
            "sessionStatus": SessionStatus(session.status).value,
            "progress": progress(session),
            "nextWorkId": session.work_queue[0] if session.work_queue else None,
        }

    def _mark_curated(self, work_id: str, session: CurationSession, curator_id: str) -> None:
        """Best-effort update of the work's curation block."""
        try:
            with self.work_store.mutate_work(work_id) as work:
                if work is None:
                    return
                timestamp = utc_now()
                curation = work.ensure_curation()
                curation.curated = True
                curation.curated_at = timestamp
                curation.curated_by = curator_id
                curation.session_id = session.id
                curation.session_title = session.title
                curation.history.append(
                    HistoryEntry(
                        action="session-curate",
                        metadata={
                            "sessionId": session.id,
                            "sessionTitle": session.title,
                            "goal": session.goal,
                        },
                        timestamp=timestamp,
                        curator_id=curator_id,
                    )
                )
        except Exception as e:
            log_error(logger, f"Failed to update work curation: {e}", "SessionService", e,
                      {"work_id": work_id, "session_id": session.id})

    def session_decisions(self, session_id: str) -> Dict[str, Any]:
        session = self._find(self.store.read_all(), session_id)

        enriched = []
        for record in session.decisions:
            payload = record.to_json_dict()
            work = self.work_store.get_work(record.work_id)
            payload["work"] = (
                {
                    "id": work.id,
                    "title": work.title,
                    "medium": work.medium,
                    "themes": work.themes,
                    "thumbnail": work.thumbnail,
                }
                if work is not None
                else None
            )
            enriched.append(payload)

        return {
            "success": True,
            "sessionId": session_id,
            "decisions": enriched,
            "summary": {
                "total": len(session.decisions),
                "accepted": len(session.accepted),
                "rejected": len(session.rejected),
                "maybe": len(session.maybe),
                "averageTimePerDecision": session.average_decision_time,
                "totalTimeSpent": session.total_review_time,
            },
        }
