"""Shared collection file under ``<data>/collections/collections.json``."""

from __future__ import annotations

from pathlib import Path

from curation.collections.models import Collection
from curation.storage import JsonRecordStore


class CollectionStore(JsonRecordStore[Collection]):
    def __init__(self, data_directory: Path):
        super().__init__(Path(data_directory) / "collections" / "collections.json", Collection)
