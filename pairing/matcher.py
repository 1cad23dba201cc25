# =============================================================================
# AGIP XP TRACKER - GREEDY MATCHER
# =============================================================================
#
# Pairs each qualified sigprop with at most one qualified coreprop.
#
# ALGORITHM:
# Sigprops are processed in input order. Each one takes the best
# still-unclaimed coreprop, and that coreprop leaves the pool.
#   - title similarity > TITLE_THRESHOLD       -> candidate (title score)
#   - else (title + body) / 2 > COMBINED_THRESHOLD -> candidate (combined)
#   - strictly higher score replaces the current best
#
# This is deliberately NOT a global optimum (no bipartite assignment).
# Earlier sigprops get first claim, and the ledger depends on that
# reproducible tie-break.
#
# =============================================================================

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

from collector.models import Proposal
from .similarity import similarity

logger = logging.getLogger(__name__)

TITLE_THRESHOLD = 0.6
COMBINED_THRESHOLD = 0.5


@dataclass(frozen=True)
class ProposalPair:
    """A sigprop and the coreprop it was matched to."""
    sigprop: Proposal
    coreprop: Proposal
    similarity: float

    @property
    def similarity_percentage(self) -> float:
        return round(self.similarity * 100, 1)


class GreedyMatcher:
    """Order-dependent one-to-one matcher between the two tracks."""

    def __init__(
        self,
        title_threshold: float = TITLE_THRESHOLD,
        combined_threshold: float = COMBINED_THRESHOLD,
        tag: str = "AGIP",
    ):
        self.title_threshold = title_threshold
        self.combined_threshold = combined_threshold
        self.tag = tag

    def _similarity(self, first: str, second: str) -> float:
        return similarity(first, second, tag=self.tag)

    def find_best_match(
        self,
        sigprop: Proposal,
        coreprops: Sequence[Proposal],
    ) -> Optional[Proposal]:
        """Best acceptable coreprop for one sigprop, or None."""
        best_match: Optional[Proposal] = None
        best_score = 0.0

        for coreprop in coreprops:
            title_score = self._similarity(sigprop.title, coreprop.title)

            if title_score > self.title_threshold:
                # Strong title signal, body not needed
                if title_score > best_score:
                    best_score = title_score
                    best_match = coreprop
                continue

            body_score = self._similarity(sigprop.body, coreprop.body)
            combined = (title_score + body_score) / 2

            if combined > self.combined_threshold and combined > best_score:
                best_score = combined
                best_match = coreprop

        return best_match

    def pair_similarity(self, sigprop: Proposal, coreprop: Proposal) -> float:
        """Recorded similarity: max of title-only and title+body average."""
        title_score = self._similarity(sigprop.title, coreprop.title)
        body_score = self._similarity(sigprop.body, coreprop.body)
        return max(title_score, (title_score + body_score) / 2)

    def match(
        self,
        sigprops: Sequence[Proposal],
        coreprops: Sequence[Proposal],
    ) -> List[ProposalPair]:
        """
        Match sigprops to coreprops greedily.

        Returns:
            Pairs in sigprop order. Unmatched sigprops produce nothing.
        """
        pairs: List[ProposalPair] = []
        used: Set[str] = set()

        for sigprop in sigprops:
            available = [cp for cp in coreprops if cp.id not in used]
            best = self.find_best_match(sigprop, available)

            if best is None:
                logger.debug(f"No coreprop match for sigprop {sigprop.id}: {sigprop.title[:60]}")
                continue

            pairs.append(ProposalPair(
                sigprop=sigprop,
                coreprop=best,
                similarity=self.pair_similarity(sigprop, best),
            ))
            used.add(best.id)

        logger.info(f"Matched {len(pairs)} sigprop/coreprop pairs")
        return pairs


def match_proposals(
    sigprops: Sequence[Proposal],
    coreprops: Sequence[Proposal],
) -> List[ProposalPair]:
    """Convenience function using the default thresholds."""
    return GreedyMatcher().match(sigprops, coreprops)
