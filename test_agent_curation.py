"""Tests for direct agent curation actions."""

import json
import tempfile
import unittest
from pathlib import Path

from core.agent_curation import CURATION_ACTIONS, AgentCurationService
from curation.works.store import WorkStore
from exceptions import InvalidInputError, NotFoundError


class TestAgentCuration(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        works_dir = Path(self.tmp.name) / "works"
        works_dir.mkdir()
        self.agent_file = works_dir / "abraham.json"
        self.agent_file.write_text(
            json.dumps([
                {"id": "abraham_001", "title": "Covenant", "status": "draft"},
                {"id": "abraham_002", "title": "Exodus", "curation": {"featured": True, "tags": ["old"]}},
            ]),
            encoding="utf-8",
        )
        self.store = WorkStore(works_dir)
        self.service = AgentCurationService(self.store)

    def tearDown(self):
        self.tmp.cleanup()

    def _apply(self, action, work_id="abraham_001", **metadata):
        return self.service.apply_action("abraham", work_id, action, metadata)

    def test_every_action_appends_history(self):
        metadata = {"curatorId": "cur", "collectionId": "col-1", "tags": ["x"], "score": 7, "note": "n"}
        for action in CURATION_ACTIONS:
            self.service.apply_action("abraham", "abraham_001", action, dict(metadata))

        curation = self.store.get_work("abraham_001").curation
        self.assertEqual([entry.action for entry in curation.history], list(CURATION_ACTIONS))

    def test_feature_and_unfeature(self):
        self._apply("feature", curatorId="cur")
        self.assertTrue(self.store.get_work("abraham_001").curation.featured)
        self._apply("feature", value=False)
        self.assertFalse(self.store.get_work("abraham_001").curation.featured)

    def test_tags_are_merged_without_duplicates(self):
        self._apply("tag", work_id="abraham_002", tags=["new", "old", "new"])
        self.assertEqual(self.store.get_work("abraham_002").curation.tags, ["old", "new"])

    def test_collect_requires_collection_id(self):
        with self.assertRaises(InvalidInputError):
            self._apply("collect", curatorId="cur")

    def test_collect_is_deduplicated(self):
        self._apply("collect", collectionId="col-1", collectionName="One")
        self._apply("collect", collectionId="col-1", collectionName="One")
        refs = self.store.get_work("abraham_001").curation.collections
        self.assertEqual([ref.id for ref in refs], ["col-1"])

    def test_approve_and_archive_change_status(self):
        self._apply("approve", curatorId="cur")
        work = self.store.get_work("abraham_001")
        self.assertEqual(work.status, "published")
        self.assertEqual(work.approved_by, "cur")

        self._apply("archive", curatorId="cur")
        self.assertEqual(self.store.get_work("abraham_001").status, "archived")

    def test_result_shape(self):
        result = self._apply("score", score=9, curatorId="cur")
        self.assertTrue(result["success"])
        self.assertEqual(result["work"]["curation"]["score"], 9)
        self.assertEqual(result["work"]["curation"]["scoredBy"], "cur")
        self.assertIsNotNone(self.store.get_work("abraham_001").last_modified)

    def test_mistyped_metadata_is_rejected_without_writing(self):
        before = self.agent_file.read_text(encoding="utf-8")

        with self.assertRaises(InvalidInputError):
            self._apply("score", score="excellent", curatorId="cur")
        with self.assertRaises(InvalidInputError):
            self._apply("tag", work_id="abraham_002", tags="exile")
        with self.assertRaises(InvalidInputError):
            self._apply("curate", curatorId={"name": "cur"})

        self.assertEqual(self.agent_file.read_text(encoding="utf-8"), before)
        status = self.service.curation_status("abraham")
        self.assertEqual(len(status["works"]), 2)

    def test_invalid_action(self):
        with self.assertRaises(InvalidInputError):
            self._apply("delete")

    def test_unknown_work_or_agent(self):
        with self.assertRaises(NotFoundError):
            self._apply("curate", work_id="abraham_999")
        with self.assertRaises(NotFoundError):
            self.service.apply_action("nobody", "nobody_1", "curate", {})

    def test_status_listing(self):
        self._apply("curate", curatorId="cur")

        everything = self.service.curation_status("abraham")
        self.assertEqual(len(everything["works"]), 2)
        self.assertEqual(everything["curatedCount"], 1)
        self.assertEqual(everything["featuredCount"], 1)

        curated = self.service.curation_status("abraham", curated_only=True)
        self.assertEqual(len(curated["works"]), 2)

        single = self.service.curation_status("abraham", work_id="abraham_001")
        self.assertTrue(single["curation"]["curated"])

        with self.assertRaises(NotFoundError):
            self.service.curation_status("abraham", work_id="abraham_404")


if __name__ == "__main__":
    unittest.main()
