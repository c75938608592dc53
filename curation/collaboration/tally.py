"""
Vote tally engine for collaborative curation.

``tally`` is a pure function of a decision's votes, the collaboration's voting
rules and its participant list. The order of checks is fixed:

1. quorum (votes cast / active participants >= quorum), else ``pending``;
2. veto rights: a ``reject`` from any curator listed in ``veto_rights``
   forces ``rejected`` whatever the mechanism;
3. the configured mechanism.

Ties never resolve to acceptance or rejection; they stay ``pending``.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from curation.collaboration.models import (
    Collaboration,
    Decision,
    NotVotedEntry,
    Outcome,
    Participant,
    Vote,
    VoteSummary,
    VoteValue,
    VotingMechanism,
    VotingRules,
)


def _count(votes: Iterable[Vote], value: VoteValue) -> int:
    return sum(1 for vote in votes if vote.vote == value)


def quorum_met(vote_count: int, active_count: int, quorum: float) -> bool:
    """Whether enough active participants have voted.

    With no active participants the quorum can never be met.
    """
    if active_count <= 0:
        return False
    return vote_count / active_count >= quorum


def _unanimous(votes: Sequence[Vote]) -> Outcome:
    all_agree = all(vote.vote in (VoteValue.ACCEPT, VoteValue.ABSTAIN) for vote in votes)
    if all_agree and _count(votes, VoteValue.ACCEPT) > 0:
        return Outcome.ACCEPTED
    if _count(votes, VoteValue.REJECT) > 0:
        return Outcome.REJECTED
    return Outcome.PENDING


def _compare(accepts: float, rejects: float) -> Outcome:
    if accepts > rejects:
        return Outcome.ACCEPTED
    if rejects > accepts:
        return Outcome.REJECTED
    return Outcome.PENDING


def _majority(votes: Sequence[Vote]) -> Outcome:
    return _compare(_count(votes, VoteValue.ACCEPT), _count(votes, VoteValue.REJECT))


def _weighted(votes: Sequence[Vote], rules: VotingRules) -> Outcome:
    # No weight map at all: nothing can be decided.
    if rules.weightings is None:
        return Outcome.PENDING

    weighted_accepts = 0.0
    weighted_rejects = 0.0
    for vote in votes:
        # Missing and zero weights both count as 1.
        weight = rules.weightings.get(vote.curator_id) or 1
        if vote.vote == VoteValue.ACCEPT:
            weighted_accepts += weight
        elif vote.vote == VoteValue.REJECT:
            weighted_rejects += weight
    return _compare(weighted_accepts, weighted_rejects)


def _veto(votes: Sequence[Vote]) -> Outcome:
    if _count(votes, VoteValue.REJECT) > 0:
        return Outcome.REJECTED
    if _count(votes, VoteValue.ACCEPT) > 0:
        return Outcome.ACCEPTED
    return Outcome.PENDING


def tally(votes: Sequence[Vote], rules: VotingRules, participants: Sequence[Participant]) -> Outcome:
    """Compute the outcome of a decision from scratch."""
    active_count = sum(1 for participant in participants if participant.active)
    if not quorum_met(len(votes), active_count, rules.quorum):
        return Outcome.PENDING

    if rules.veto_rights:
        vetoers = set(rules.veto_rights)
        if any(vote.curator_id in vetoers and vote.vote == VoteValue.REJECT for vote in votes):
            return Outcome.REJECTED

    mechanism = VotingMechanism(rules.mechanism)
    if mechanism == VotingMechanism.UNANIMOUS:
        return _unanimous(votes)
    if mechanism == VotingMechanism.MAJORITY:
        return _majority(votes)
    if mechanism == VotingMechanism.WEIGHTED:
        return _weighted(votes, rules)
    if mechanism == VotingMechanism.VETO:
        return _veto(votes)
    return Outcome.PENDING


def tally_decision(decision: Decision, collaboration: Collaboration) -> Outcome:
    return tally(decision.votes, collaboration.voting_rules, collaboration.participants)


def summarize(decision: Decision, collaboration: Collaboration) -> VoteSummary:
    """Participation summary of one decision against the current participant list."""
    active: List[Participant] = collaboration.active_participants
    voted_ids = {vote.curator_id for vote in decision.votes}
    not_voted = [
        NotVotedEntry(curator_id=participant.curator_id, name=participant.name)
        for participant in active
        if participant.curator_id not in voted_ids
    ]
    return VoteSummary(
        total_participants=len(active),
        voted=len(decision.votes),
        not_voted=len(not_voted),
        not_voted_list=not_voted,
        accepts=_count(decision.votes, VoteValue.ACCEPT),
        rejects=_count(decision.votes, VoteValue.REJECT),
        abstains=_count(decision.votes, VoteValue.ABSTAIN),
        quorum_met=quorum_met(len(decision.votes), len(active), collaboration.voting_rules.quorum),
    )
