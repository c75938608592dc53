"""Curated collection records."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from curation.storage import RecordModel


class CollectionType(str, Enum):
    EXHIBITION = "exhibition"
    PERMANENT = "permanent"
    TEMPORARY = "temporary"
    RESEARCH = "research"
    SALE = "sale"


class CollectionStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"


class CollectionPermission(str, Enum):
    VIEW = "view"
    ADD = "add"
    REMOVE = "remove"
    EDIT = "edit"
    ADMIN = "admin"


class CollectionCriteria(RecordModel):
    """Acceptance criteria; only enforced when ``auto_accept`` is set."""

    min_quality: float = 70
    required_themes: List[str] = Field(default_factory=list)
    preferred_styles: List[str] = Field(default_factory=list)
    max_works: Optional[int] = None
    auto_accept: bool = False
    auto_accept_threshold: float = 90


class CollectionWorkEntry(RecordModel):
    id: str
    added_at: str
    added_by: str
    position: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class CollectionStats(RecordModel):
    total_works: int = 0
    average_quality: float = 0
    top_themes: List[str] = Field(default_factory=list)
    view_count: int = 0
    share_count: int = 0


class CollectionCollaborator(RecordModel):
    curator_id: str
    permissions: List[CollectionPermission] = Field(default_factory=list)


class Collection(RecordModel):
    id: str
    title: str
    description: str = ""
    type: CollectionType = CollectionType.PERMANENT
    status: CollectionStatus = CollectionStatus.DRAFT
    owner_id: str
    organization_id: Optional[str] = None
    criteria: CollectionCriteria = Field(default_factory=CollectionCriteria)
    works: List[CollectionWorkEntry] = Field(default_factory=list)
    stats: CollectionStats = Field(default_factory=CollectionStats)
    visibility: Visibility = Visibility.PRIVATE
    collaborators: List[CollectionCollaborator] = Field(default_factory=list)
    created_at: str
    updated_at: str
    published_at: Optional[str] = None

    def can(self, curator_id: Optional[str], permission: CollectionPermission) -> bool:
        """Owner, or a collaborator holding ``permission`` or ``admin``."""
        if curator_id is not None and self.owner_id == curator_id:
            return True
        return any(
            collaborator.curator_id == curator_id
            and (permission in collaborator.permissions or CollectionPermission.ADMIN in collaborator.permissions)
            for collaborator in self.collaborators
        )

    def has_work(self, work_id: str) -> bool:
        return any(entry.id == work_id for entry in self.works)
