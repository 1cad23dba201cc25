# =============================================================================
# AGIP XP TRACKER - OUTCOME CLASSIFIER
# =============================================================================
#
# Decides whether a proposal reached quorum and passed under the DAO
# voting rules, and which track (sigprop / coreprop) it belongs to.
#
# PASSING RULE:
# The leading choice must beat the runner-up by a differential that
# grows with the number of choices:
#   2 choices -> 10%, 3 -> 15%, 4 -> 20%, +5% per additional choice
#
# QUORUM RULE:
# Explicit proposal quorum wins. Without one, the fallback picks the
# NEWER (lower) threshold when the tally already meets it, else the OLDER
# (higher) one.
# KNOWN HEURISTIC: the real rule is date-based. Behavior is kept as-is
# until the cut-over date is confirmed.
#
# =============================================================================

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from collector.models import Proposal
from shared.config import TrackerConfig
from shared.enums import ProposalTrack

NEWER_QUORUM = 7.2e6
OLDER_QUORUM = 9e6


def required_differential(num_choices: int) -> float:
    """Required winning margin (percentage points) for a choice count."""
    if num_choices == 2:
        return 10.0
    if num_choices == 3:
        return 15.0
    if num_choices == 4:
        return 20.0
    return 20.0 + (num_choices - 4) * 5.0


@dataclass(frozen=True)
class VoteOutcome:
    """Classification of one proposal, with the numbers behind it."""
    quorum_reached: bool
    passed: bool
    quorum_threshold: float
    winning_percentage: float
    second_percentage: float
    differential: float
    required_differential: float

    @property
    def qualified(self) -> bool:
        return self.quorum_reached and self.passed


class OutcomeClassifier:
    """Applies the quorum and differential rules to proposals."""

    def __init__(
        self,
        newer_quorum: float = NEWER_QUORUM,
        older_quorum: float = OLDER_QUORUM,
        proposal_tag: str = "AGIP",
    ):
        self.newer_quorum = newer_quorum
        self.older_quorum = older_quorum
        self.proposal_tag = proposal_tag

    @classmethod
    def from_config(cls, config: TrackerConfig) -> "OutcomeClassifier":
        return cls(
            newer_quorum=float(config.newer_quorum),
            older_quorum=float(config.older_quorum),
            proposal_tag=config.proposal_tag,
        )

    def quorum_threshold(self, proposal: Proposal) -> float:
        if proposal.quorum and proposal.quorum > 0:
            return proposal.quorum
        if proposal.scores_total >= self.newer_quorum:
            return self.newer_quorum
        return self.older_quorum

    def has_reached_quorum(self, proposal: Proposal) -> bool:
        return proposal.scores_total >= self.quorum_threshold(proposal)

    def has_passed(self, proposal: Proposal) -> bool:
        return self.classify(proposal).passed

    def classify(self, proposal: Proposal) -> VoteOutcome:
        """
        Classify a proposal.

        A proposal with no scores or a zero total never passes.
        """
        threshold = self.quorum_threshold(proposal)
        quorum_reached = proposal.scores_total >= threshold

        scores = list(proposal.scores)
        total = proposal.scores_total
        required = required_differential(len(scores))

        if not scores or total <= 0:
            return VoteOutcome(
                quorum_reached=quorum_reached,
                passed=False,
                quorum_threshold=threshold,
                winning_percentage=0.0,
                second_percentage=0.0,
                differential=0.0,
                required_differential=required,
            )

        ranked = sorted(scores, reverse=True)
        top = ranked[0]
        second = ranked[1] if len(ranked) > 1 else 0.0

        # Margin from raw tallies keeps integral boundaries exact
        differential = (top - second) * 100 / total

        return VoteOutcome(
            quorum_reached=quorum_reached,
            passed=differential >= required,
            quorum_threshold=threshold,
            winning_percentage=top * 100 / total,
            second_percentage=second * 100 / total,
            differential=differential,
            required_differential=required,
        )

    def is_qualified(self, proposal: Proposal) -> bool:
        return self.classify(proposal).qualified

    def track_of(self, proposal: Proposal) -> ProposalTrack:
        """Coreprops carry the proposal tag in their title; nothing else does."""
        if self.proposal_tag.lower() in proposal.title.lower():
            return ProposalTrack.COREPROP
        return ProposalTrack.SIGPROP

    def qualify(
        self,
        proposals: Iterable[Proposal],
    ) -> Tuple[List[Proposal], List[Proposal]]:
        """
        Filter to qualified proposals and split them by track.

        Returns:
            (sigprops, coreprops), each in input order
        """
        sigprops: List[Proposal] = []
        coreprops: List[Proposal] = []

        for proposal in proposals:
            if not self.is_qualified(proposal):
                continue
            if self.track_of(proposal) is ProposalTrack.COREPROP:
                coreprops.append(proposal)
            else:
                sigprops.append(proposal)

        return sigprops, coreprops


def classify(
    proposal: Proposal,
    classifier: Optional[OutcomeClassifier] = None,
) -> VoteOutcome:
    """Convenience function using the default thresholds."""
    return (classifier or OutcomeClassifier()).classify(proposal)
