from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_registry
from core.registry import CurationRegistry
from core.requests import CurationActionRequest

router = APIRouter()


@router.post("/{agent_id}/curate")
def curate_work(agent_id: str, request: CurationActionRequest,
                registry: CurationRegistry = Depends(get_registry)):
    return registry.agent_curation.apply_action(
        agent_id, request.work_id, request.action, request.metadata
    )


@router.get("/{agent_id}/curate")
def curation_status(
    agent_id: str,
    work_id: Optional[str] = Query(None, alias="workId"),
    curated: bool = Query(False),
    registry: CurationRegistry = Depends(get_registry),
):
    return registry.agent_curation.curation_status(agent_id, work_id=work_id, curated_only=curated)
