from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_registry
from core.registry import CurationRegistry
from core.requests import SessionDecisionRequest, SessionDraft

router = APIRouter()


@router.get("/sessions")
def list_sessions(
    curator_id: Optional[str] = Query(None, alias="curatorId"),
    status: Optional[str] = Query(None),
    agent_id: Optional[str] = Query(None, alias="agentId"),
    registry: CurationRegistry = Depends(get_registry),
):
    return registry.sessions.list_sessions(curator_id=curator_id, status=status, agent_id=agent_id)


@router.post("/sessions")
def create_session(draft: SessionDraft, registry: CurationRegistry = Depends(get_registry)):
    return registry.sessions.create_session(draft)


@router.post("/sessions/{session_id}/decisions")
def record_decision(session_id: str, request: SessionDecisionRequest,
                    registry: CurationRegistry = Depends(get_registry)):
    return registry.sessions.record_decision(
        session_id,
        work_id=request.work_id,
        decision=request.decision,
        curator_id=request.curator_id,
        reason=request.reason,
        time_spent=request.time_spent,
    )


@router.get("/sessions/{session_id}/decisions")
def session_decisions(session_id: str, registry: CurationRegistry = Depends(get_registry)):
    return registry.sessions.session_decisions(session_id)


@router.get("/analytics")
def curator_analytics(
    curator_id: Optional[str] = Query(None, alias="curatorId"),
    period: str = Query("all"),
    registry: CurationRegistry = Depends(get_registry),
):
    return registry.analytics.curator_analytics(curator_id, period=period)
