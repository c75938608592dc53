"""Work (creation) records owned by agents."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field

from curation.storage import OpenRecordModel, RecordModel


class RegistryAnalysis(OpenRecordModel):
    """Registry-time analysis scores cached on a work."""

    quality_score: Optional[float] = None
    technical_quality: Optional[float] = None
    aesthetic_score: Optional[float] = None
    uniqueness_score: Optional[float] = None
    style_attributes: List[str] = Field(default_factory=list)


class WorkAnalysis(OpenRecordModel):
    registry: Optional[RegistryAnalysis] = None


class CollectionRef(RecordModel):
    """Back-reference from a work to a collection that holds it."""

    id: str
    name: Optional[str] = None
    added_at: str
    added_by: Optional[str] = None


class HistoryEntry(RecordModel):
    """One curation action applied to a work."""

    action: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str
    curator_id: Optional[str] = None


class WorkCuration(OpenRecordModel):
    """Curation state attached to a work; created on first curation action."""

    featured: bool = False
    curated: bool = False
    score: Optional[float] = None
    tags: List[str] = Field(default_factory=list)
    collections: List[CollectionRef] = Field(default_factory=list)
    exhibitions: List[Dict[str, Any]] = Field(default_factory=list)
    annotations: List[Dict[str, Any]] = Field(default_factory=list)
    history: List[HistoryEntry] = Field(default_factory=list)

    curated_at: Optional[str] = None
    curated_by: Optional[str] = None
    featured_at: Optional[str] = None
    featured_by: Optional[str] = None
    scored_at: Optional[str] = None
    scored_by: Optional[str] = None
    collaboration_id: Optional[str] = None
    collaboration_title: Optional[str] = None
    session_id: Optional[str] = None
    session_title: Optional[str] = None


class Work(OpenRecordModel):
    """A creation record. Keys this model does not know about are kept as-is."""

    id: str
    title: str = ""
    medium: Optional[str] = None
    themes: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    files: List[Dict[str, Any]] = Field(default_factory=list)
    status: Optional[str] = None
    analysis: Optional[WorkAnalysis] = None
    curation: Optional[WorkCuration] = None
    last_modified: Optional[str] = None
    published_at: Optional[str] = None
    approved_by: Optional[str] = None
    archived_at: Optional[str] = None
    archived_by: Optional[str] = None

    @property
    def quality_score(self) -> Optional[float]:
        if self.analysis is None or self.analysis.registry is None:
            return None
        return self.analysis.registry.quality_score

    @property
    def style_attributes(self) -> List[str]:
        if self.analysis is None or self.analysis.registry is None:
            return []
        return self.analysis.registry.style_attributes

    @property
    def thumbnail(self) -> Optional[str]:
        if not self.files:
            return None
        return self.files[0].get("url")

    def ensure_curation(self) -> WorkCuration:
        """Return the curation block, creating the empty default if absent."""
        if self.curation is None:
            self.curation = WorkCuration(score=None)
        return self.curation

    def minimal(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "medium": self.medium,
            "thumbnail": self.thumbnail,
        }


def agent_id_for(work_id: str) -> str:
    """Works are stored per agent; the agent id is the prefix before the first '_'."""
    return work_id.split("_")[0]
