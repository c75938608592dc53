"""Shared collaboration file under ``<data>/collaborations/collaborations.json``."""

from __future__ import annotations

from pathlib import Path

from curation.collaboration.models import Collaboration
from curation.storage import JsonRecordStore


class CollaborationStore(JsonRecordStore[Collaboration]):
    """All collaborations, loaded and rewritten in full on every mutation."""

    def __init__(self, data_directory: Path):
        super().__init__(Path(data_directory) / "collaborations" / "collaborations.json", Collaboration)
