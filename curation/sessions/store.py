"""Curation sessions under ``<data>/curation/sessions.json``."""

from __future__ import annotations

from pathlib import Path

from curation.sessions.models import CurationSession
from curation.storage import JsonRecordStore


class SessionStore(JsonRecordStore[CurationSession]):
    def __init__(self, data_directory: Path):
        super().__init__(Path(data_directory) / "curation" / "sessions.json", CurationSession)
