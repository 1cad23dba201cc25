# =============================================================================
# AGIP XP TRACKER - PAIRING
# =============================================================================
#
# Pure, deterministic pairing logic. No I/O lives here.
#
# PIPELINE:
# proposals -> OutcomeClassifier (qualified, split by track)
#           -> GreedyMatcher (uses the similarity scorer)
#           -> SequenceValidator (gap diagnostics)
#
# =============================================================================

from .outcome import OutcomeClassifier, VoteOutcome, required_differential
from .similarity import similarity, levenshtein_distance
from .matcher import GreedyMatcher, ProposalPair, match_proposals
from .sequence import (
    SequenceParser,
    SequenceValidator,
    SequenceReport,
    SequenceGap,
    SequenceGapError,
    passed_sequence,
)

__all__ = [
    "OutcomeClassifier",
    "VoteOutcome",
    "required_differential",
    "similarity",
    "levenshtein_distance",
    "GreedyMatcher",
    "ProposalPair",
    "match_proposals",
    "SequenceParser",
    "SequenceValidator",
    "SequenceReport",
    "SequenceGap",
    "SequenceGapError",
    "passed_sequence",
]
