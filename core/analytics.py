"""
Curator analytics derived from session decisions and collaboration votes.
"""
import logging
import statistics
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from curation.collaboration.models import Outcome, VoteValue
from curation.collaboration.store import CollaborationStore
from curation.sessions.models import CurationSession, SessionDecision, SessionDecisionValue, SessionStatus
from curation.sessions.store import SessionStore
from curation.storage import parse_timestamp, utc_now
from curation.works.models import Work, agent_id_for
from curation.works.store import WorkStore
from exceptions import InvalidInputError
from logging_config import log_debug

logger = logging.getLogger(__name__)

PERIODS: Dict[str, Optional[timedelta]] = {
    "day": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
    "all": None,
}

MIN_DECISIONS_FOR_CONSISTENCY = 10
MIN_THEME_REVIEWS = 3
MIN_DECISIONS_FOR_FATIGUE = 20
DEFAULT_BATCH_SIZE = 20
DEFAULT_SESSION_MINUTES = 30


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    if period not in PERIODS:
        raise InvalidInputError(f"Invalid period. Must be one of: {', '.join(PERIODS)}")
    span = PERIODS[period]
    if span is None:
        return datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (now or datetime.now(timezone.utc)) - span


def _rate(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0


def _is(decision: SessionDecision, value: SessionDecisionValue) -> bool:
    return decision.decision == value


def average_quality(works: List[Work]) -> float:
    scores = [w.quality_score for w in works if w.quality_score is not None]
    return statistics.fmean(scores) if scores else 0


def consistency_score(decisions: List[SessionDecision], works: List[Work]) -> float:
    """How uniformly works of similar quality (10-point buckets) were judged, 0-100."""
    if len(decisions) < MIN_DECISIONS_FOR_CONSISTENCY:
        return 50

    buckets: Dict[int, List[bool]] = {}
    for work in works:
        if work.quality_score is None:
            continue
        decision = next((d for d in decisions if d.work_id == work.id), None)
        if decision is None:
            continue
        bucket = int(work.quality_score // 10) * 10
        buckets.setdefault(bucket, []).append(_is(decision, SessionDecisionValue.ACCEPT))

    ratios = [
        max(sum(verdicts), len(verdicts) - sum(verdicts)) / len(verdicts)
        for verdicts in buckets.values()
        if len(verdicts) >= 2
    ]
    return statistics.fmean(ratios) * 100 if ratios else 50


def _hour(decision: SessionDecision) -> int:
    return parse_timestamp(decision.timestamp).hour


class CuratorAnalyticsService:

    def __init__(self, session_store: SessionStore, collaboration_store: CollaborationStore,
                 work_store: WorkStore):
        self.session_store = session_store
        self.collaboration_store = collaboration_store
        self.work_store = work_store

    def _resolve(self, decisions: List[SessionDecision]) -> List[Work]:
        works = []
        for decision in decisions:
            work = self.work_store.get_work(decision.work_id)
            if work is not None:
                works.append(work)
        return works

    def disagreement_rate(self, curator_id: str) -> float:
        """Share of the curator's accept/reject votes that went against the outcome."""
        total_votes = 0
        disagreements = 0
        for collaboration in self.collaboration_store.read_all():
            if collaboration.participant(curator_id) is None:
                continue
            for decision in collaboration.decisions:
                vote = decision.vote_of(curator_id)
                if vote is None:
                    continue
                total_votes += 1
                if (vote.vote == VoteValue.ACCEPT and decision.outcome == Outcome.REJECTED) or \
                        (vote.vote == VoteValue.REJECT and decision.outcome == Outcome.ACCEPTED):
                    disagreements += 1
        return _rate(disagreements, total_votes)

    def _preferences(self, decisions: List[SessionDecision], works: List[Work]) -> Dict[str, Any]:
        by_id = {work.id: work for work in works}
        themes: Dict[str, Counter] = {}
        agents: Dict[str, Counter] = {}

        for decision in decisions:
            work = by_id.get(decision.work_id)
            if work is None:
                continue
            verdict = SessionDecisionValue(decision.decision).value
            for theme in work.themes:
                themes.setdefault(theme, Counter())[verdict] += 1
            agents.setdefault(agent_id_for(decision.work_id), Counter())[verdict] += 1

        def acceptance(counts: Counter) -> float:
            return _rate(counts["accept"], counts["accept"] + counts["reject"])

        favored_themes = sorted(
            (
                {"theme": theme, "acceptanceRate": acceptance(counts)}
                for theme, counts in themes.items()
                if counts["accept"] + counts["reject"] >= MIN_THEME_REVIEWS
            ),
            key=lambda item: item["acceptanceRate"],
            reverse=True,
        )[:5]

        favored_agents = sorted(
            (
                {"agentId": agent, "acceptanceRate": acceptance(counts)}
                for agent, counts in agents.items()
                if counts["accept"] + counts["reject"] > 0
            ),
            key=lambda item: item["acceptanceRate"],
            reverse=True,
        )

        accepted_ids = {d.work_id for d in decisions if _is(d, SessionDecisionValue.ACCEPT)}
        styles: List[str] = []
        for work in works:
            if work.id in accepted_ids:
                for style in work.style_attributes:
                    if style not in styles:
                        styles.append(style)

        bias_indicators: Dict[str, float] = {}
        morning = [d for d in decisions if 6 <= _hour(d) < 12]
        evening = [d for d in decisions if 18 <= _hour(d) < 24]
        if len(morning) > 5 and len(evening) > 5:
            morning_rate = sum(_is(d, SessionDecisionValue.ACCEPT) for d in morning) / len(morning)
            evening_rate = sum(_is(d, SessionDecisionValue.ACCEPT) for d in evening) / len(evening)
            bias_indicators["timeOfDay"] = abs(morning_rate - evening_rate) * 100

        return {
            "favoredThemes": favored_themes,
            "favoredStyles": styles[:5],
            "favoredAgents": favored_agents,
            "biasIndicators": bias_indicators,
        }

    @staticmethod
    def _performance(curator_id: str, sessions: List[CurationSession]) -> Dict[str, Any]:
        fatigue = 0.0
        for session in sessions:
            own = [d for d in session.decisions if d.curator_id == curator_id]
            if len(own) < MIN_DECISIONS_FOR_FATIGUE:
                continue
            half = len(own) // 2
            first, second = own[:half], own[half:]
            first_rate = sum(_is(d, SessionDecisionValue.ACCEPT) for d in first) / len(first)
            second_rate = sum(_is(d, SessionDecisionValue.ACCEPT) for d in second) / len(second)
            fatigue = max(fatigue, abs(first_rate - second_rate) * 100)

        batch_sizes = [sum(1 for d in s.decisions if d.curator_id == curator_id) for s in sessions]
        session_minutes = [s.total_review_time / 60000 for s in sessions]

        return {
            "fatigueIndicator": fatigue,
            "optimalBatchSize": round(statistics.fmean(batch_sizes)) if batch_sizes else DEFAULT_BATCH_SIZE,
            "optimalSessionLength": (
                round(statistics.fmean(session_minutes)) if session_minutes else DEFAULT_SESSION_MINUTES
            ),
        }

    @staticmethod
    def insights(metrics: Dict[str, float]) -> List[Dict[str, Any]]:
        """Rule-based hints about a curator's habits."""
        generated_at = utc_now()
        found = []

        def add(kind: str, message: str, severity: str) -> None:
            found.append({"type": kind, "message": message, "severity": severity, "timestamp": generated_at})

        if metrics["acceptanceRate"] < 20:
            add("acceptance_rate",
                "Your acceptance rate is very selective. Consider if criteria might be too strict.",
                "suggestion")
        elif metrics["acceptanceRate"] > 80:
            add("acceptance_rate",
                "High acceptance rate detected. Ensure quality standards are maintained.", "suggestion")

        if metrics["averageReviewTime"] < 5:
            add("review_time",
                "Very quick review times. Consider spending more time evaluating each work.", "warning")
        elif metrics["averageReviewTime"] > 60:
            add("review_time",
                "Long review times detected. Consider setting time limits to improve efficiency.", "info")

        if metrics["averageQualityAccepted"] < metrics["averageQualityRejected"]:
            add("quality_inversion",
                "Accepting lower quality works than rejecting. Review your criteria.", "warning")

        if metrics["consistencyScore"] < 60:
            add("consistency",
                "Inconsistent decision patterns detected. Consider documenting your criteria.", "suggestion")

        if metrics["totalReviews"] > 100:
            add("high_activity",
                "High curation activity! Take breaks to maintain decision quality.", "info")

        return found

    def curator_analytics(self, curator_id: Optional[str], period: str = "all") -> Dict[str, Any]:
        if not curator_id:
            raise InvalidInputError("curatorId is required")
        start = period_start(period)

        sessions = [
            s for s in self.session_store.read_all()
            if s.involves(curator_id) and parse_timestamp(s.started_at) >= start
        ]
        decisions = [d for s in sessions for d in s.decisions if d.curator_id == curator_id]

        total_reviews = len(decisions)
        non_skip = [d for d in decisions if not _is(d, SessionDecisionValue.SKIP)]
        accepts = [d for d in decisions if _is(d, SessionDecisionValue.ACCEPT)]
        rejects = [d for d in decisions if _is(d, SessionDecisionValue.REJECT)]
        acceptance_rate = _rate(len(accepts), len(non_skip))
        average_review_time = (
            sum(d.time_spent or 0 for d in decisions) / len(decisions) / 1000 if decisions else 0
        )

        hour_counts = Counter(_hour(d) for d in decisions)
        peak_hours = [hour for hour, _ in sorted(hour_counts.items(), key=lambda kv: (-kv[1], kv[0]))[:3]]

        accepted_works = self._resolve(accepts)
        rejected_works = self._resolve(rejects)
        reviewed_works = accepted_works + rejected_works

        quality = {
            "averageQualityAccepted": average_quality(accepted_works),
            "averageQualityRejected": average_quality(rejected_works),
            "consistencyScore": consistency_score(decisions, reviewed_works),
            "disagreementRate": self.disagreement_rate(curator_id),
        }
        activity = {
            "totalReviews": total_reviews,
            "totalDecisions": len(non_skip),
            "acceptanceRate": acceptance_rate,
            "averageReviewTime": average_review_time,
            "peakHours": peak_hours,
            "sessionsCompleted": sum(1 for s in sessions if s.status == SessionStatus.COMPLETED),
        }

        log_debug(logger, "Curator analytics computed", "CuratorAnalytics", {
            "curator_id": curator_id,
            "period": period,
            "sessions": len(sessions),
        })

        return {
            "success": True,
            "analytics": {
                "curatorId": curator_id,
                "period": period,
                "activity": activity,
                "quality": quality,
                "preferences": self._preferences(decisions, reviewed_works),
                "performance": self._performance(curator_id, sessions),
                "insights": self.insights({**activity, **quality}),
                "generatedAt": utc_now(),
            },
            "meta": {
                "curatorId": curator_id,
                "period": period,
                "dateRange": {"start": start.isoformat(), "end": utc_now()},
                "sessionsAnalyzed": len(sessions),
            },
        }
