from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_registry
from core.registry import CurationRegistry
from core.requests import AddWorkRequest, CollectionDraft

router = APIRouter()


@router.get("")
def list_collections(
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    visibility: Optional[str] = Query(None),
    registry: CurationRegistry = Depends(get_registry),
):
    return registry.collections.list_collections(
        owner_id=owner_id, type=type, status=status, visibility=visibility
    )


@router.post("")
def create_collection(draft: CollectionDraft, registry: CurationRegistry = Depends(get_registry)):
    return registry.collections.create_collection(draft)


@router.get("/{collection_id}/works")
def list_collection_works(
    collection_id: str,
    format: str = Query("full"),
    registry: CurationRegistry = Depends(get_registry),
):
    return registry.collections.list_works(collection_id, format=format)


@router.post("/{collection_id}/works")
def add_collection_work(collection_id: str, request: AddWorkRequest,
                        registry: CurationRegistry = Depends(get_registry)):
    return registry.collections.add_work(
        collection_id,
        request.work_id,
        curator_id=request.curator_id,
        position=request.position,
        metadata=request.metadata,
    )


@router.delete("/{collection_id}/works")
def remove_collection_work(
    collection_id: str,
    work_id: Optional[str] = Query(None, alias="workId"),
    curator_id: Optional[str] = Query(None, alias="curatorId"),
    registry: CurationRegistry = Depends(get_registry),
):
    return registry.collections.remove_work(collection_id, work_id, curator_id=curator_id)
