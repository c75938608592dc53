#!/usr/bin/env python3
"""Tests for collaborative voting and applying accepted decisions to works."""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from config_system.config_loader import RegistryConfig, VotingConfig
from core.registry import CurationRegistry
from core.requests import CollaborationDraft
from curation.collaboration.models import Participant, VotingMechanism, VotingRules
from curation.events.models import CurationEventType
from exceptions import InvalidInputError, NotFoundError, PermissionDeniedError


class VotingTestBase(unittest.TestCase):
    """Registry on a temporary data directory with one agent's works."""

    recompute_outcome_on_read = False

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self.tmp.name)
        works_dir = self.data_dir / "works"
        works_dir.mkdir(parents=True)
        (works_dir / "abraham.json").write_text(
            json.dumps([
                {"id": "abraham_001", "title": "Covenant", "themes": ["memory"]},
                {"id": "abraham_002", "title": "Exodus", "themes": ["journey"]},
            ]),
            encoding="utf-8",
        )
        config = RegistryConfig(
            data_directory=str(self.data_dir),
            voting=VotingConfig(recompute_outcome_on_read=self.recompute_outcome_on_read),
        )
        self.registry = CurationRegistry(config)
        self.voting = self.registry.voting

    def tearDown(self):
        self.tmp.cleanup()

    def _create(self, mechanism="majority", quorum=0.6, veto_rights=(), weightings=None):
        draft = CollaborationDraft(
            title="Genesis review",
            participants=[
                Participant(curator_id="alice", name="Alice"),
                Participant(curator_id="bob", name="Bob"),
                Participant(curator_id="carol", name="Carol"),
            ],
            voting_rules=VotingRules(
                mechanism=VotingMechanism(mechanism),
                quorum=quorum,
                veto_rights=list(veto_rights),
                weightings=weightings,
            ),
        )
        return self.voting.create_collaboration(draft)["collaboration"]["id"]

    def _work(self, work_id="abraham_001"):
        return self.registry.work_store.get_work(work_id)


class TestSubmitVote(VotingTestBase):

    def test_first_vote_is_pending(self):
        collaboration_id = self._create()
        result = self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "accept")

        self.assertTrue(result["success"])
        self.assertEqual(result["vote"]["vote"], "accept")
        self.assertEqual(result["decision"]["outcome"], "pending")
        self.assertIsNone(result["decision"]["decidedAt"])
        self.assertEqual(result["decision"]["voteSummary"]["voted"], 1)
        self.assertEqual(result["decision"]["voteSummary"]["notVoted"], 2)

    def test_majority_accepts_and_marks_work_curated(self):
        collaboration_id = self._create()
        self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "accept")
        result = self.voting.submit_vote(collaboration_id, "abraham_001", "bob", "accept", reason="strong")

        self.assertEqual(result["decision"]["outcome"], "accepted")
        self.assertIsNotNone(result["decision"]["decidedAt"])

        curation = self._work().curation
        self.assertTrue(curation.curated)
        self.assertEqual(curation.curated_by, "collaborative")
        self.assertEqual(curation.collaboration_id, collaboration_id)
        self.assertEqual(curation.collaboration_title, "Genesis review")
        self.assertEqual(len(curation.history), 1)
        self.assertEqual(curation.history[0].action, "collaborative-curate")
        self.assertEqual(curation.history[0].metadata["participants"], "Alice, Bob, Carol")
        self.assertIsNone(self._work("abraham_002").curation)

    def test_every_accepted_vote_reapplies(self):
        collaboration_id = self._create()
        self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "accept")
        self.voting.submit_vote(collaboration_id, "abraham_001", "bob", "accept")
        self.voting.submit_vote(collaboration_id, "abraham_001", "carol", "abstain")

        history = self._work().curation.history
        self.assertEqual([entry.action for entry in history], ["collaborative-curate"] * 2)

    def test_unanimous_reject_does_not_touch_work(self):
        collaboration_id = self._create(mechanism="unanimous")
        self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "accept")
        result = self.voting.submit_vote(collaboration_id, "abraham_001", "bob", "reject")

        self.assertEqual(result["decision"]["outcome"], "rejected")
        self.assertIsNone(self._work().curation)

    def test_revote_overwrites_previous_vote(self):
        collaboration_id = self._create()
        self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "reject")
        self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "accept")

        status = self.voting.voting_status(collaboration_id, "abraham_001")
        self.assertEqual(len(status["votes"]), 1)
        self.assertEqual(status["votes"][0]["vote"], "accept")

    def test_invalid_vote_value(self):
        collaboration_id = self._create()
        with self.assertRaises(InvalidInputError):
            self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "maybe")

    def test_invalid_vote_checked_before_lookup(self):
        with self.assertRaises(InvalidInputError):
            self.voting.submit_vote("missing", "abraham_001", "alice", "yes")

    def test_unknown_collaboration(self):
        with self.assertRaises(NotFoundError):
            self.voting.submit_vote("missing", "abraham_001", "alice", "accept")

    def test_non_participant_forbidden(self):
        collaboration_id = self._create()
        with self.assertRaises(PermissionDeniedError):
            self.voting.submit_vote(collaboration_id, "abraham_001", "mallory", "accept")

    def test_inactive_participant_forbidden(self):
        collaboration_id = self._create()
        with self.registry.collaboration_store.mutate() as collaborations:
            collaborations[0].participant("carol").active = False

        with self.assertRaises(PermissionDeniedError):
            self.voting.submit_vote(collaboration_id, "abraham_001", "carol", "accept")

    def test_accepted_vote_for_missing_work_still_succeeds(self):
        collaboration_id = self._create()
        self.voting.submit_vote(collaboration_id, "ghost_001", "alice", "accept")
        result = self.voting.submit_vote(collaboration_id, "ghost_001", "bob", "accept")

        self.assertTrue(result["success"])
        self.assertEqual(result["decision"]["outcome"], "accepted")

    def test_apply_for_missing_work_leaves_agent_file_alone(self):
        collaboration = self.registry.collaboration_store.find(self._create())
        works_file = self.data_dir / "works" / "abraham.json"
        before = works_file.read_text(encoding="utf-8")

        self.assertFalse(self.registry.applier.apply("abraham_999", collaboration, "alice"))
        self.assertEqual(works_file.read_text(encoding="utf-8"), before)

    def test_apply_failure_is_swallowed_and_recorded(self):
        collaboration_id = self._create()
        self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "accept")

        with patch.object(self.registry.work_store, "mutate_work", side_effect=OSError("disk full")):
            result = self.voting.submit_vote(collaboration_id, "abraham_001", "bob", "accept")

        self.assertTrue(result["success"])
        self.assertEqual(result["decision"]["outcome"], "accepted")
        failures = self.registry.event_log.read_by_type(CurationEventType.DECISION_APPLY_FAILED)
        self.assertEqual(len(failures), 1)
        self.assertEqual(failures[0].subject_id, "abraham_001")

    def test_events_recorded_for_votes_and_decisions(self):
        collaboration_id = self._create()
        self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "accept")
        self.voting.submit_vote(collaboration_id, "abraham_001", "bob", "accept")

        log = self.registry.event_log
        self.assertEqual(len(log.read_by_type(CurationEventType.VOTE_CAST)), 2)
        self.assertEqual(len(log.read_by_type(CurationEventType.DECISION_REACHED)), 1)
        self.assertEqual(len(log.read_by_type(CurationEventType.DECISION_APPLIED)), 1)

    def test_veto_right_rejects_despite_majority(self):
        collaboration_id = self._create(veto_rights=["carol"])
        self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "accept")
        self.voting.submit_vote(collaboration_id, "abraham_001", "bob", "accept")
        result = self.voting.submit_vote(collaboration_id, "abraham_001", "carol", "reject")

        self.assertEqual(result["decision"]["outcome"], "rejected")


class TestListingAndStatus(VotingTestBase):

    def test_list_filters_by_active_participant(self):
        self._create()
        self.assertEqual(self.voting.list_collaborations(curator_id="alice")["meta"]["total"], 1)
        self.assertEqual(self.voting.list_collaborations(curator_id="mallory")["meta"]["total"], 0)
        self.assertEqual(self.voting.list_collaborations(status="completed")["meta"]["total"], 0)

    def test_list_on_empty_store_initialises_file(self):
        result = self.voting.list_collaborations()
        self.assertEqual(result["collaborations"], [])
        self.assertTrue(self.registry.collaboration_store.path.exists())

    def test_status_without_votes(self):
        collaboration_id = self._create()
        status = self.voting.voting_status(collaboration_id, "abraham_002")
        self.assertEqual(status["status"], "no_votes")
        self.assertEqual(status["outcome"], "pending")

    def test_status_for_all_decisions(self):
        collaboration_id = self._create()
        self.voting.submit_vote(collaboration_id, "abraham_001", "alice", "accept")
        self.voting.submit_vote(collaboration_id, "abraham_001", "bob", "accept")
        self.voting.submit_vote(collaboration_id, "abraham_002", "alice", "reject")

        status = self.voting.voting_status(collaboration_id)
        self.assertEqual(status["stats"], {"total": 2, "accepted": 1, "rejected": 0, "pending": 1})

    def test_status_unknown_collaboration(self):
        with self.assertRaises(NotFoundError):
            self.voting.voting_status("missing")

    def test_stored_outcome_survives_participant_deactivation(self):
        collaboration_id = self._create(quorum=1.0)
        for curator in ("alice", "bob", "carol"):
            self.voting.submit_vote(collaboration_id, "abraham_001", curator, "reject" if curator == "carol" else "accept")

        with self.registry.collaboration_store.mutate() as collaborations:
            collaborations[0].participants.append(Participant(curator_id="dave", name="Dave"))

        status = self.voting.voting_status(collaboration_id, "abraham_001")
        self.assertEqual(status["outcome"], "accepted")
        self.assertFalse(status["summary"]["quorumMet"])


class TestRecomputeOnRead(VotingTestBase):

    recompute_outcome_on_read = True

    def test_outcome_recomputed_against_current_participants(self):
        collaboration_id = self._create(quorum=1.0)
        for curator in ("alice", "bob", "carol"):
            self.voting.submit_vote(collaboration_id, "abraham_001", curator, "accept")

        with self.registry.collaboration_store.mutate() as collaborations:
            collaborations[0].participants.append(Participant(curator_id="dave", name="Dave"))

        status = self.voting.voting_status(collaboration_id, "abraham_001")
        self.assertEqual(status["outcome"], "pending")

        stored = self.registry.collaboration_store.find(collaboration_id).decision_for("abraham_001")
        self.assertEqual(stored.outcome, "accepted")


if __name__ == "__main__":
    unittest.main()
