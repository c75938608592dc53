"""Append-only curation event log utilities."""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

from curation.events.models import CurationEvent, CurationEventType
from curation.storage import lock_for, utc_now


class CurationEventLog:
    """Read/write JSONL curation events under the data directory."""

    def __init__(self, events_dir: Path):
        self.events_dir = Path(events_dir)
        self.events_file = self.events_dir / "curation_events.jsonl"

    def emit(self, event: CurationEvent) -> None:
        """Append one event to the event log."""
        self.events_dir.mkdir(parents=True, exist_ok=True)
        with lock_for(self.events_file):
            with open(self.events_file, "a", encoding="utf-8") as file_obj:
                file_obj.write(json.dumps(event.model_dump(mode="json"), ensure_ascii=False))
                file_obj.write("\n")
                file_obj.flush()

    def record(
        self,
        event_type: CurationEventType,
        subject_id: str,
        summary: str,
        actor: Optional[str] = None,
        references: Sequence[str] = (),
    ) -> CurationEvent:
        """Build, append and return a new event."""
        event = CurationEvent(
            event_id=str(uuid.uuid4()),
            timestamp=utc_now(),
            actor=actor,
            event_type=event_type,
            subject_id=subject_id,
            references=list(references),
            summary=summary,
        )
        self.emit(event)
        return event

    def read_all(self) -> List[CurationEvent]:
        """Read and parse all events in insertion order."""
        if not self.events_file.exists():
            return []

        events: List[CurationEvent] = []
        with open(self.events_file, "r", encoding="utf-8") as file_obj:
            for line in file_obj:
                payload = line.strip()
                if not payload:
                    continue
                events.append(CurationEvent.model_validate_json(payload))
        return events

    def read_by_type(self, event_type: CurationEventType) -> List[CurationEvent]:
        """Return events matching the given type."""
        return [event for event in self.read_all() if event.event_type == event_type]

    def count(self) -> int:
        """Return total number of curation events."""
        return len(self.read_all())
