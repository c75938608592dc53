#!/usr/bin/env python3
"""Tests for the curation event log, structured logging and schema export."""

import io
import json
import logging
import tempfile
import unittest
import uuid
from datetime import datetime
from pathlib import Path

from curation.events.event_log import CurationEventLog
from curation.events.models import CurationEvent, CurationEventType
from logging_config import JSONFormatter, LogPayload, RegistryLogger, log_debug, log_error, log_step_complete
from scripts import export_schemas


class TestCurationEventLog(unittest.TestCase):
    """JSONL event log behavior tests."""

    def test_record_read_filter_and_count(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            events_dir = Path(temp_dir) / "events"
            event_log = CurationEventLog(events_dir)

            event_types = [
                CurationEventType.VOTE_CAST,
                CurationEventType.DECISION_REACHED,
                CurationEventType.VOTE_CAST,
            ]
            for index, event_type in enumerate(event_types):
                event_log.record(
                    event_type,
                    subject_id=f"abraham_{index}",
                    summary=f"summary-{index}",
                    actor="alice",
                    references=["collab-1"],
                )

            all_events = event_log.read_all()
            self.assertEqual(len(all_events), 3)
            self.assertEqual(len(event_log.read_by_type(CurationEventType.VOTE_CAST)), 2)
            self.assertEqual(event_log.count(), 3)
            self.assertEqual([e.subject_id for e in all_events], ["abraham_0", "abraham_1", "abraham_2"])
            for event in all_events:
                self.assertIsNotNone(datetime.fromisoformat(event.timestamp).tzinfo)
                self.assertIsInstance(uuid.UUID(event.event_id), uuid.UUID)

            events_file = events_dir / "curation_events.jsonl"
            raw_lines = [line for line in events_file.read_text(encoding="utf-8").splitlines() if line]
            self.assertEqual(len(raw_lines), 3)
            self.assertEqual(json.loads(raw_lines[0])["event_type"], "vote_cast")

    def test_missing_log_reads_empty(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            event_log = CurationEventLog(Path(temp_dir) / "events")
            self.assertEqual(event_log.read_all(), [])
            self.assertEqual(event_log.count(), 0)

    def test_event_roundtrip(self):
        event = CurationEvent(
            event_id=str(uuid.uuid4()),
            timestamp="2025-01-01T00:00:00+00:00",
            event_type=CurationEventType.WORK_COLLECTED,
            subject_id="solienne_1",
            references=["col-1"],
            summary="Added to collection",
        )
        roundtrip = CurationEvent.model_validate(event.model_dump(mode="json"))
        self.assertEqual(roundtrip.event_type, CurationEventType.WORK_COLLECTED)
        self.assertIsNone(roundtrip.actor)


class TestStructuredLogging(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        handler = logging.StreamHandler(self.stream)
        handler.setFormatter(JSONFormatter(execution_id="test1234"))
        self.logger = logging.getLogger(f"test_events.{uuid.uuid4().hex}")
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False
        self.logger.addHandler(handler)

    def _entries(self):
        return [json.loads(line) for line in self.stream.getvalue().splitlines() if line]

    def test_step_complete_fields(self):
        log_step_complete(self.logger, "VotingService", "submit_vote", "Vote recorded",
                          {"work_id": "abraham_1"}, duration_ms=12.5)
        entry = self._entries()[0]
        self.assertEqual(entry["execution_id"], "test1234")
        self.assertEqual(entry["component"], "VotingService")
        self.assertEqual(entry["step"], "submit_vote")
        self.assertEqual(entry["data"], {"work_id": "abraham_1"})
        self.assertEqual(entry["duration_ms"], 12.5)

    def test_error_block(self):
        try:
            raise ValueError("bad value")
        except ValueError as e:
            log_error(self.logger, "It failed", "Test", e)
        entry = self._entries()[0]
        self.assertEqual(entry["level"], "ERROR")
        self.assertEqual(entry["error"]["message"], "bad value")
        self.assertIn("ValueError", entry["error"]["traceback"])

    def test_debug_suppressed_at_info(self):
        log_debug(self.logger, "hidden", "Test")
        self.assertEqual(self._entries(), [])

    def test_string_level_and_payload(self):
        RegistryLogger().log_with_context(
            self.logger, "warning", "Slow write",
            payload=LogPayload(component="WorkStore", step="write_all", duration_ms=250.0),
        )
        entry = self._entries()[0]
        self.assertEqual(entry["level"], "WARNING")
        self.assertEqual(entry["component"], "WorkStore")
        self.assertEqual(entry["duration_ms"], 250.0)
        self.assertNotIn("data", entry)


class TestSchemaExport(unittest.TestCase):

    def test_export_writes_record_schemas(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            self.assertEqual(export_schemas.main(temp_dir), 0)
            schema_path = Path(temp_dir) / "Collaboration.schema.json"
            self.assertTrue(schema_path.exists())
            schema = json.loads(schema_path.read_text(encoding="utf-8"))
            self.assertEqual(schema.get("title"), "Collaboration")
            self.assertIn("votingRules", schema["properties"])
            for name in export_schemas.RECORD_MODELS:
                self.assertTrue((Path(temp_dir) / f"{name}.schema.json").exists())


if __name__ == "__main__":
    unittest.main()
