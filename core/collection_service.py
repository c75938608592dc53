"""
Collection management: creation, listing and work membership.
"""
import logging
import uuid
from collections import Counter
from typing import Any, Dict, Optional

from curation.collections.models import (
    Collection,
    CollectionPermission,
    CollectionStats,
    CollectionWorkEntry,
)
from curation.collections.stats import compute_stats, meets_criteria
from curation.collections.store import CollectionStore
from curation.events.event_log import CurationEventLog
from curation.events.models import CurationEventType
from curation.storage import utc_now
from curation.works.models import CollectionRef, HistoryEntry
from curation.works.store import WorkStore
from core.requests import CollectionDraft
from exceptions import (
    ConflictError,
    CriteriaNotMetError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from logging_config import log_error, log_step_complete

logger = logging.getLogger(__name__)


class CollectionService:
    """Collection CRUD plus add/remove of member works with stats upkeep."""

    def __init__(self, store: CollectionStore, work_store: WorkStore, event_log: CurationEventLog):
        self.store = store
        self.work_store = work_store
        self.event_log = event_log

    def create_collection(self, draft: CollectionDraft) -> Dict[str, Any]:
        now = utc_now()
        collection = Collection(
            id=uuid.uuid4().hex,
            title=draft.title,
            description=draft.description,
            type=draft.type,
            status=draft.status,
            owner_id=draft.owner_id,
            organization_id=draft.organization_id,
            criteria=draft.criteria,
            works=[],
            stats=CollectionStats(),
            visibility=draft.visibility,
            collaborators=draft.collaborators,
            created_at=now,
            updated_at=now,
        )
        with self.store.mutate() as collections:
            collections.append(collection)

        log_step_complete(logger, "CollectionService", "create_collection", "Collection created", {
            "collection_id": collection.id,
            "owner_id": collection.owner_id,
        })
        return {
            "success": True,
            "collection": collection.to_json_dict(),
            "message": "Collection created successfully",
        }

    def list_collections(self, owner_id: Optional[str] = None, type: Optional[str] = None,
                         status: Optional[str] = None, visibility: Optional[str] = None) -> Dict[str, Any]:
        self.store.ensure_exists()
        collections = self.store.read_all()

        if owner_id:
            collections = [
                c for c in collections
                if c.owner_id == owner_id or any(collab.curator_id == owner_id for collab in c.collaborators)
            ]
        if type:
            collections = [c for c in collections if c.type == type]
        if status:
            collections = [c for c in collections if c.status == status]
        if visibility:
            collections = [c for c in collections if c.visibility == visibility]

        collections.sort(key=lambda c: c.updated_at, reverse=True)

        return {
            "success": True,
            "collections": [c.to_json_dict() for c in collections],
            "meta": {
                "total": len(collections),
                "byType": dict(Counter(c.type.value for c in collections)),
                "byStatus": dict(Counter(c.status.value for c in collections)),
            },
        }

    @staticmethod
    def _find(collections, collection_id: str) -> Collection:
        for collection in collections:
            if collection.id == collection_id:
                return collection
        raise NotFoundError("Collection not found")

    def add_work(self, collection_id: str, work_id: Optional[str], curator_id: Optional[str] = None,
                 position: Optional[int] = None, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Add a work to a collection.

        Permission is only checked when a curator id is supplied. Criteria
        failures reject the work only for auto-accept collections.
        """
        if not work_id:
            raise InvalidInputError("workId is required")

        with self.store.mutate() as collections:
            collection = self._find(collections, collection_id)

            if curator_id and not collection.can(curator_id, CollectionPermission.ADD):
                raise PermissionDeniedError("Insufficient permissions")

            if collection.has_work(work_id):
                raise ConflictError("Work already in collection")

            work = self.work_store.get_work(work_id)
            if work is not None and not meets_criteria(work, collection.criteria):
                if collection.criteria.auto_accept:
                    raise CriteriaNotMetError("Work does not meet collection criteria")

            added_by = curator_id or collection.owner_id
            collection.works.append(
                CollectionWorkEntry(
                    id=work_id,
                    added_at=utc_now(),
                    added_by=added_by,
                    position=position or len(collection.works),
                    metadata=metadata or {},
                )
            )
            collection.stats = compute_stats(collection, self.work_store.get_work)
            collection.updated_at = utc_now()

        self._record_membership(work_id, collection, added_by)
        self.event_log.record(
            CurationEventType.WORK_COLLECTED,
            subject_id=work_id,
            summary=f"Added to collection '{collection.title}'",
            actor=added_by,
            references=[collection.id],
        )
        log_step_complete(logger, "CollectionService", "add_work", "Work added to collection", {
            "collection_id": collection.id,
            "work_id": work_id,
            "total_works": len(collection.works),
        })

        return {
            "success": True,
            "message": "Work added to collection",
            "collection": {
                "id": collection.id,
                "title": collection.title,
                "totalWorks": len(collection.works),
            },
        }

    def _record_membership(self, work_id: str, collection: Collection, curator_id: str) -> None:
        """Mirror the membership onto the work's own curation block (best effort)."""
        try:
            with self.work_store.mutate_work(work_id) as work:
                if work is None:
                    return
                timestamp = utc_now()
                curation = work.ensure_curation()
                curation.collections.append(
                    CollectionRef(id=collection.id, name=collection.title,
                                  added_at=timestamp, added_by=curator_id)
                )
                curation.history.append(
                    HistoryEntry(
                        action="collect",
                        metadata={
                            "collectionId": collection.id,
                            "collectionName": collection.title,
                            "collectionType": collection.type.value,
                        },
                        timestamp=timestamp,
                        curator_id=curator_id,
                    )
                )
        except Exception as e:
            log_error(logger, f"Failed to update work collections: {e}", "CollectionService", e,
                      {"work_id": work_id, "collection_id": collection.id})

    def remove_work(self, collection_id: str, work_id: Optional[str],
                    curator_id: Optional[str] = None) -> Dict[str, Any]:
        if not work_id:
            raise InvalidInputError("workId is required")

        with self.store.mutate() as collections:
            collection = self._find(collections, collection_id)

            if curator_id and not collection.can(curator_id, CollectionPermission.REMOVE):
                raise PermissionDeniedError("Insufficient permissions")

            remaining = [entry for entry in collection.works if entry.id != work_id]
            if len(remaining) == len(collection.works):
                raise NotFoundError("Work not found in collection")

            collection.works = remaining
            collection.stats = compute_stats(collection, self.work_store.get_work)
            collection.updated_at = utc_now()

        self.event_log.record(
            CurationEventType.WORK_REMOVED,
            subject_id=work_id,
            summary=f"Removed from collection '{collection.title}'",
            actor=curator_id,
            references=[collection.id],
        )
        return {
            "success": True,
            "message": "Work removed from collection",
            "collection": {
                "id": collection.id,
                "title": collection.title,
                "totalWorks": len(collection.works),
            },
        }

    def list_works(self, collection_id: str, format: str = "full") -> Dict[str, Any]:
        """Membership entries whose works still resolve, ordered by position."""
        collection = self._find(self.store.read_all(), collection_id)

        entries = []
        for entry in collection.works:
            work = self.work_store.get_work(entry.id)
            if work is None:
                continue
            payload = entry.to_json_dict()
            if format == "full":
                payload["work"] = work.to_json_dict()
            elif format == "minimal":
                payload["work"] = work.minimal()
            entries.append(payload)

        entries.sort(key=lambda item: item.get("position") or 0)

        return {
            "success": True,
            "collectionId": collection_id,
            "collectionTitle": collection.title,
            "works": entries,
            "meta": {
                "total": len(entries),
                "stats": collection.stats.to_json_dict(),
            },
        }
