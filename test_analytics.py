#!/usr/bin/env python3
"""Tests for curator analytics."""

import json
import tempfile
import unittest
from pathlib import Path

from core.analytics import CuratorAnalyticsService, consistency_score, period_start
from curation.collaboration.models import (
    Collaboration,
    Decision,
    Outcome,
    Participant,
    Vote,
    VoteValue,
    VotingMechanism,
    VotingRules,
)
from curation.collaboration.store import CollaborationStore
from curation.sessions.models import CurationSession, SessionDecision, SessionDecisionValue, SessionStatus
from curation.sessions.store import SessionStore
from curation.works.models import Work
from curation.works.store import WorkStore
from exceptions import InvalidInputError


def _decision(work_id, value, hour, time_spent=0, curator_id="cur"):
    return SessionDecision(
        work_id=work_id,
        decision=SessionDecisionValue(value),
        timestamp=f"2025-01-01T{hour:02d}:00:00+00:00",
        time_spent=time_spent,
        curator_id=curator_id,
    )


def _session(session_id, decisions, curator_id="cur", started_at="2025-01-01T08:00:00+00:00",
             status=SessionStatus.ACTIVE, total_review_time=0):
    return CurationSession(
        id=session_id,
        curator_id=curator_id,
        title=session_id,
        status=status,
        started_at=started_at,
        last_active_at=started_at,
        total_review_time=total_review_time,
        decisions=decisions,
    )


class TestConsistencyScore(unittest.TestCase):

    def test_few_decisions_is_neutral(self):
        self.assertEqual(consistency_score([_decision("a_1", "accept", 9)], []), 50)

    def test_bucket_agreement(self):
        works = [
            Work.model_validate({"id": f"a_{i}", "analysis": {"registry": {"qualityScore": q}}})
            for i, q in [(1, 81), (2, 85), (3, 89), (4, 41), (5, 45)]
        ]
        decisions = [
            _decision("a_1", "accept", 9),
            _decision("a_2", "accept", 9),
            _decision("a_3", "reject", 9),
            _decision("a_4", "reject", 9),
            _decision("a_5", "reject", 9),
        ] + [_decision(f"b_{i}", "skip", 9) for i in range(5)]

        self.assertAlmostEqual(consistency_score(decisions, works), (2 / 3 + 1) / 2 * 100)

    def test_period_validation(self):
        with self.assertRaises(InvalidInputError):
            period_start("decade")
        self.assertEqual(period_start("all").year, 1970)


class TestCuratorAnalytics(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        data_dir = Path(self.tmp.name)
        (data_dir / "works").mkdir(parents=True)
        (data_dir / "works" / "ava.json").write_text(
            json.dumps([
                {"id": "ava_1", "themes": ["light"],
                 "analysis": {"registry": {"qualityScore": 90, "styleAttributes": ["minimal"]}}},
                {"id": "ava_2", "themes": ["light"], "analysis": {"registry": {"qualityScore": 80}}},
                {"id": "ava_3", "themes": ["light", "dark"], "analysis": {"registry": {"qualityScore": 40}}},
                {"id": "ava_4", "themes": ["dark"], "analysis": {"registry": {"qualityScore": 30}}},
            ]),
            encoding="utf-8",
        )

        self.session_store = SessionStore(data_dir)
        self.session_store.write_all([
            _session(
                "s1",
                [
                    _decision("ava_1", "accept", 9, 4000),
                    _decision("ava_2", "accept", 9, 6000),
                    _decision("ava_3", "reject", 10, 2000),
                    _decision("ava_4", "skip", 21, 0),
                ],
                status=SessionStatus.COMPLETED,
                total_review_time=1800000,
            ),
            _session("s2", [_decision("ava_1", "reject", 12, curator_id="other")], curator_id="other"),
        ])

        self.collaboration_store = CollaborationStore(data_dir)
        self.collaboration_store.write_all([
            Collaboration(
                id="c1",
                title="Panel",
                participants=[Participant(curator_id="cur", name="Cur"), Participant(curator_id="x", name="X")],
                voting_rules=VotingRules(mechanism=VotingMechanism.MAJORITY, quorum=0.5),
                decisions=[
                    Decision(work_id="ava_1", outcome=Outcome.REJECTED, votes=[
                        Vote(curator_id="cur", vote=VoteValue.ACCEPT, timestamp="2025-01-01T00:00:00Z"),
                    ]),
                    Decision(work_id="ava_2", outcome=Outcome.ACCEPTED, votes=[
                        Vote(curator_id="cur", vote=VoteValue.ACCEPT, timestamp="2025-01-01T00:00:00Z"),
                    ]),
                ],
                created_at="2025-01-01T00:00:00Z",
                updated_at="2025-01-01T00:00:00Z",
            ),
        ])

        self.service = CuratorAnalyticsService(
            self.session_store, self.collaboration_store, WorkStore(data_dir / "works")
        )

    def tearDown(self):
        self.tmp.cleanup()

    def test_activity(self):
        analytics = self.service.curator_analytics("cur")["analytics"]
        activity = analytics["activity"]

        self.assertEqual(activity["totalReviews"], 4)
        self.assertEqual(activity["totalDecisions"], 3)
        self.assertAlmostEqual(activity["acceptanceRate"], 200 / 3)
        self.assertAlmostEqual(activity["averageReviewTime"], 3.0)
        self.assertEqual(activity["peakHours"], [9, 10, 21])
        self.assertEqual(activity["sessionsCompleted"], 1)

    def test_quality(self):
        quality = self.service.curator_analytics("cur")["analytics"]["quality"]
        self.assertEqual(quality["averageQualityAccepted"], 85)
        self.assertEqual(quality["averageQualityRejected"], 40)
        self.assertEqual(quality["consistencyScore"], 50)
        self.assertEqual(quality["disagreementRate"], 50)

    def test_preferences(self):
        preferences = self.service.curator_analytics("cur")["analytics"]["preferences"]
        self.assertEqual([t["theme"] for t in preferences["favoredThemes"]], ["light"])
        self.assertAlmostEqual(preferences["favoredThemes"][0]["acceptanceRate"], 200 / 3)
        self.assertEqual(preferences["favoredStyles"], ["minimal"])
        self.assertEqual([a["agentId"] for a in preferences["favoredAgents"]], ["ava"])
        self.assertEqual(preferences["biasIndicators"], {})

    def test_performance_and_insights(self):
        analytics = self.service.curator_analytics("cur")["analytics"]
        self.assertEqual(analytics["performance"], {
            "fatigueIndicator": 0.0,
            "optimalBatchSize": 4,
            "optimalSessionLength": 30,
        })
        self.assertEqual([i["type"] for i in analytics["insights"]], ["review_time", "consistency"])

    def test_fatigue_indicator(self):
        decisions = [_decision(f"ava_{i}", "accept", 9) for i in range(10)]
        decisions += [_decision(f"ava_{i}", "reject", 10) for i in range(10, 20)]
        self.session_store.write_all([_session("long", decisions)])

        performance = self.service.curator_analytics("cur")["analytics"]["performance"]
        self.assertEqual(performance["fatigueIndicator"], 100)

    def test_unknown_curator_gets_defaults(self):
        result = self.service.curator_analytics("nobody", period="week")
        self.assertEqual(result["meta"]["sessionsAnalyzed"], 0)
        self.assertEqual(result["analytics"]["performance"]["optimalBatchSize"], 20)
        self.assertEqual(result["analytics"]["performance"]["optimalSessionLength"], 30)
        self.assertEqual(result["analytics"]["activity"]["acceptanceRate"], 0)

    def test_period_excludes_old_sessions(self):
        result = self.service.curator_analytics("cur", period="day")
        self.assertEqual(result["meta"]["sessionsAnalyzed"], 0)

    def test_curator_required(self):
        with self.assertRaises(InvalidInputError):
            self.service.curator_analytics(None)


if __name__ == "__main__":
    unittest.main()
