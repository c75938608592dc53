"""Queue bookkeeping for curation sessions."""

from __future__ import annotations

from typing import Any, Dict, List

from curation.sessions.models import (
    CurationSession,
    SessionCriteria,
    SessionDecision,
    SessionDecisionValue,
    SessionStatus,
)
from curation.storage import parse_timestamp
from curation.works.models import Work


def filter_works(works: List[Work], criteria: SessionCriteria) -> List[Work]:
    """Select the works a new session should queue."""
    selected = list(works)

    if criteria.themes:
        selected = [w for w in selected if any(theme in criteria.themes for theme in w.themes)]

    if criteria.min_quality:
        selected = [w for w in selected if (w.quality_score or 0) >= criteria.min_quality]

    if criteria.media_types:
        selected = [w for w in selected if w.medium in criteria.media_types]

    date_range = criteria.date_range
    if date_range is not None:
        if date_range.start:
            start = parse_timestamp(date_range.start)
            selected = [w for w in selected if w.created_at and parse_timestamp(w.created_at) >= start]
        if date_range.end:
            end = parse_timestamp(date_range.end)
            selected = [w for w in selected if w.created_at and parse_timestamp(w.created_at) <= end]

    return selected


def _without(items: List[str], work_id: str) -> List[str]:
    return [item for item in items if item != work_id]


def apply_decision(session: CurationSession, record: SessionDecision) -> None:
    """Move the work between queues and refresh the session counters.

    A work lives in exactly one of queue/accepted/rejected/maybe afterwards;
    ``skip`` sends it to the back of the queue without marking it reviewed.
    """
    work_id = record.work_id
    session.decisions.append(record)

    session.work_queue = _without(session.work_queue, work_id)
    session.accepted = _without(session.accepted, work_id)
    session.rejected = _without(session.rejected, work_id)
    session.maybe = _without(session.maybe, work_id)

    decision = SessionDecisionValue(record.decision)
    if decision == SessionDecisionValue.ACCEPT:
        session.accepted.append(work_id)
    elif decision == SessionDecisionValue.REJECT:
        session.rejected.append(work_id)
    elif decision == SessionDecisionValue.MAYBE:
        session.maybe.append(work_id)
    else:
        session.work_queue.append(work_id)

    if decision != SessionDecisionValue.SKIP and work_id not in session.reviewed:
        session.reviewed.append(work_id)

    session.last_active_at = record.timestamp
    session.total_review_time += record.time_spent or 0
    if session.decisions:
        total_time = sum(d.time_spent or 0 for d in session.decisions)
        session.average_decision_time = total_time / len(session.decisions)

    if session.target_count and len(session.accepted) >= session.target_count:
        session.status = SessionStatus.COMPLETED
        session.completed_at = record.timestamp
    elif not session.work_queue and not session.maybe:
        session.status = SessionStatus.COMPLETED
        session.completed_at = record.timestamp


def progress(session: CurationSession) -> Dict[str, Any]:
    return {
        "reviewed": len(session.reviewed),
        "remaining": len(session.work_queue),
        "accepted": len(session.accepted),
        "rejected": len(session.rejected),
        "maybe": len(session.maybe),
        "targetProgress": (
            f"{len(session.accepted)}/{session.target_count}" if session.target_count else None
        ),
    }
