"""
Direct curation actions on one agent's works.
"""
import logging
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from curation.storage import utc_now
from curation.works.models import CollectionRef, HistoryEntry, Work
from curation.works.store import WorkStore
from exceptions import InvalidInputError, NotFoundError
from logging_config import log_step_complete

logger = logging.getLogger(__name__)


def _feature(work: Work, metadata: Dict[str, Any], timestamp: str) -> None:
    work.curation.featured = metadata.get("value") is not False
    work.curation.featured_at = timestamp
    work.curation.featured_by = metadata.get("curatorId")


def _curate(work: Work, metadata: Dict[str, Any], timestamp: str) -> None:
    work.curation.curated = True
    work.curation.curated_at = timestamp
    work.curation.curated_by = metadata.get("curatorId")


def _tag(work: Work, metadata: Dict[str, Any], timestamp: str) -> None:
    tags = metadata.get("tags") or []
    if not isinstance(tags, list):
        raise InvalidInputError("tags must be a list")
    # dict.fromkeys keeps first-seen order while dropping duplicates.
    work.curation.tags = list(dict.fromkeys([*work.curation.tags, *tags]))


def _score(work: Work, metadata: Dict[str, Any], timestamp: str) -> None:
    work.curation.score = metadata.get("score")
    work.curation.scored_at = timestamp
    work.curation.scored_by = metadata.get("curatorId")


def _collect(work: Work, metadata: Dict[str, Any], timestamp: str) -> None:
    collection_id = metadata.get("collectionId")
    if not collection_id:
        raise InvalidInputError("collectionId is required for collect")
    if any(ref.id == collection_id for ref in work.curation.collections):
        return
    work.curation.collections.append(
        CollectionRef(
            id=collection_id,
            name=metadata.get("collectionName"),
            added_at=timestamp,
            added_by=metadata.get("curatorId"),
        )
    )


def _exhibit(work: Work, metadata: Dict[str, Any], timestamp: str) -> None:
    work.curation.exhibitions.append({
        "id": metadata.get("exhibitionId"),
        "name": metadata.get("exhibitionName"),
        "venue": metadata.get("venue"),
        "dates": metadata.get("dates"),
        "addedAt": timestamp,
        "curatedBy": metadata.get("curatorId"),
    })


def _annotate(work: Work, metadata: Dict[str, Any], timestamp: str) -> None:
    work.curation.annotations.append({
        "note": metadata.get("note"),
        "type": metadata.get("noteType") or "general",
        "author": metadata.get("curatorId"),
        "timestamp": timestamp,
    })


def _approve(work: Work, metadata: Dict[str, Any], timestamp: str) -> None:
    work.status = "published"
    work.published_at = timestamp
    work.approved_by = metadata.get("curatorId")


def _archive(work: Work, metadata: Dict[str, Any], timestamp: str) -> None:
    work.status = "archived"
    work.archived_at = timestamp
    work.archived_by = metadata.get("curatorId")


CURATION_ACTIONS: Dict[str, Callable[[Work, Dict[str, Any], str], None]] = {
    "feature": _feature,
    "curate": _curate,
    "tag": _tag,
    "score": _score,
    "collect": _collect,
    "exhibit": _exhibit,
    "annotate": _annotate,
    "approve": _approve,
    "archive": _archive,
}


class AgentCurationService:
    """Applies one named curation action to a work and logs it in the work's history."""

    def __init__(self, work_store: WorkStore):
        self.work_store = work_store

    def apply_action(self, agent_id: str, work_id: str, action: str,
                     metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if action not in CURATION_ACTIONS:
            raise InvalidInputError(f"Invalid action. Valid actions: {', '.join(CURATION_ACTIONS)}")
        metadata = metadata or {}

        # An exception inside the block leaves the agent file untouched.
        try:
            with self.work_store.mutate_agent(agent_id) as works:
                work = next((w for w in works if w.id == work_id), None)
                if work is None:
                    raise NotFoundError("Work not found")

                timestamp = utc_now()
                work.ensure_curation()
                CURATION_ACTIONS[action](work, metadata, timestamp)
                work.curation.history.append(
                    HistoryEntry(action=action, metadata=metadata, timestamp=timestamp,
                                 curator_id=metadata.get("curatorId"))
                )
                work.last_modified = timestamp
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or action
            raise InvalidInputError(f"Invalid metadata for {action}: {field}: {error['msg']}") from e

        log_step_complete(logger, "AgentCuration", action, f"Applied {action} to work", {
            "agent_id": agent_id,
            "work_id": work_id,
        })
        return {
            "success": True,
            "message": f"Successfully applied {action} to work {work_id}",
            "work": {
                "id": work.id,
                "title": work.title,
                "curation": work.curation.to_json_dict(),
            },
        }

    def curation_status(self, agent_id: str, work_id: Optional[str] = None,
                        curated_only: bool = False) -> Dict[str, Any]:
        works = self.work_store.list_works(agent_id)

        if work_id:
            work = next((w for w in works if w.id == work_id), None)
            if work is None:
                raise NotFoundError("Work not found")
            return {
                "success": True,
                "workId": work_id,
                "curation": work.curation.to_json_dict() if work.curation else {},
            }

        if curated_only:
            works = [
                w for w in works
                if w.curation and (w.curation.curated or w.curation.featured or (w.curation.score or 0) > 0)
            ]

        return {
            "success": True,
            "agent": {"id": agent_id, "handle": agent_id.split("-")[0]},
            "curatedCount": sum(1 for w in works if w.curation and w.curation.curated),
            "featuredCount": sum(1 for w in works if w.curation and w.curation.featured),
            "works": [
                {
                    "id": w.id,
                    "title": w.title,
                    "curation": w.curation.to_json_dict() if w.curation else {},
                }
                for w in works
            ],
        }
