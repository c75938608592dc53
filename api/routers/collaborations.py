from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_registry
from core.registry import CurationRegistry
from core.requests import CollaborationDraft, VoteRequest

router = APIRouter()


@router.get("")
def list_collaborations(
    curator_id: Optional[str] = Query(None, alias="curatorId"),
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    registry: CurationRegistry = Depends(get_registry),
):
    return registry.voting.list_collaborations(curator_id=curator_id, type=type, status=status)


@router.post("")
def create_collaboration(draft: CollaborationDraft, registry: CurationRegistry = Depends(get_registry)):
    return registry.voting.create_collaboration(draft)


@router.post("/{collaboration_id}/vote")
def submit_vote(collaboration_id: str, request: VoteRequest,
                registry: CurationRegistry = Depends(get_registry)):
    """Cast or replace a curator's vote on one work."""
    return registry.voting.submit_vote(
        collaboration_id,
        work_id=request.work_id,
        curator_id=request.curator_id,
        vote=request.vote,
        reason=request.reason,
    )


@router.get("/{collaboration_id}/vote")
def voting_status(
    collaboration_id: str,
    work_id: Optional[str] = Query(None, alias="workId"),
    registry: CurationRegistry = Depends(get_registry),
):
    return registry.voting.voting_status(collaboration_id, work_id=work_id)
