# =============================================================================
# AGIP XP TRACKER - SEQUENCE NUMBERS & GAP VALIDATION
# =============================================================================
#
# AGIP numbers are the join key between the two tracks and the ledger key.
#
# EXTRACTION:
#   "[AGIP-142] Foo", "AGIP 142: Foo", "[agip142] Foo"  -> 142
#   taken from the COREPROP title of a pair
#
# GAP VALIDATION:
# Every integer in [lowest, highest] that no pair produced is a gap.
# Each gap is classified by looking for the number in the ORIGINAL
# qualified sets (before matching). Gaps are diagnostics, except when
# more than max_recent_gaps of them sit within the most recent
# recent_window numbers - that pattern points at a fetch or matching
# defect, and the run is aborted.
#
# =============================================================================

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from collector.models import Proposal
from shared.enums import GapReason
from .matcher import ProposalPair

logger = logging.getLogger(__name__)

RECENT_WINDOW = 5
MAX_RECENT_GAPS = 2


class SequenceParser:
    """Reads AGIP numbers out of proposal titles."""

    def __init__(self, tag: str = "AGIP"):
        self.tag = tag
        escaped = re.escape(tag)
        self._number_re = re.compile(rf"\[?{escaped}[\s\-]*(\d+)\]?", re.IGNORECASE)
        self._prefix_re = re.compile(rf"^\[{escaped}[\s\-]*\d+\]\s*", re.IGNORECASE)

    def extract(self, title: str) -> Optional[int]:
        match = self._number_re.search(title or "")
        if not match:
            return None
        return int(match.group(1))

    def clean_title(self, title: str) -> str:
        """Title without its leading [AGIP-n] prefix."""
        return self._prefix_re.sub("", title or "")

    def ledger_key(self, number: int) -> str:
        return f"{self.tag.lower()}_{number}"

    def pair_number(self, pair: ProposalPair) -> Optional[int]:
        return self.extract(pair.coreprop.title)

    def mentions(self, title: str, number: int) -> bool:
        """
        Loose check used for gap diagnosis.

        Tag, then any run of spaces or hyphens, then the number, not
        followed by another digit ("AGIP 14" does not mention 143).
        """
        pattern = rf"{re.escape(self.tag)}[\s\-]*{number}(?!\d)"
        return re.search(pattern, title or "", re.IGNORECASE) is not None


def passed_sequence(
    pairs: Sequence[ProposalPair],
    parser: Optional[SequenceParser] = None,
) -> List[Dict[str, Any]]:
    """
    Passed AGIPs for the results file, newest first.

    Pairs without a number are kept and sort last.
    """
    parser = parser or SequenceParser()
    rows = []
    for pair in pairs:
        rows.append({
            "agip_number": parser.pair_number(pair),
            "title": parser.clean_title(pair.coreprop.title),
            "full_coreprop_title": pair.coreprop.title,
            "sigprop_id": pair.sigprop.id,
            "coreprop_id": pair.coreprop.id,
            "similarity_percentage": pair.similarity_percentage,
        })

    rows.sort(key=lambda row: row["agip_number"] or 0, reverse=True)
    return rows


@dataclass(frozen=True)
class SequenceGap:
    """One missing AGIP number and why it is missing."""
    number: int
    coreprop_found: bool
    sigprop_found: bool
    reason: GapReason


@dataclass
class SequenceReport:
    """Result of a sequence validation."""
    numbers: List[int] = field(default_factory=list)
    lowest: Optional[int] = None
    highest: Optional[int] = None
    missing: List[int] = field(default_factory=list)
    gaps: List[SequenceGap] = field(default_factory=list)
    recent_missing: List[int] = field(default_factory=list)
    max_recent_gaps: int = MAX_RECENT_GAPS

    @property
    def has_gaps(self) -> bool:
        return bool(self.missing)

    @property
    def is_critical(self) -> bool:
        return len(self.recent_missing) > self.max_recent_gaps

    def to_dict(self) -> Dict[str, Any]:
        return {
            "numbers": list(self.numbers),
            "lowest": self.lowest,
            "highest": self.highest,
            "missing": list(self.missing),
            "recent_missing": list(self.recent_missing),
            "gaps": [
                {
                    "agip_number": gap.number,
                    "coreprop_found": gap.coreprop_found,
                    "sigprop_found": gap.sigprop_found,
                    "reason": gap.reason.value,
                }
                for gap in self.gaps
            ],
        }


class SequenceGapError(RuntimeError):
    """Too many recent AGIPs are missing - systematic fetch/matching issue."""

    def __init__(self, report: SequenceReport):
        self.report = report
        recent = ", ".join(str(n) for n in report.recent_missing)
        super().__init__(
            f"Too many recent AGIPs missing ({len(report.recent_missing)}): {recent}. "
            f"This suggests a systematic issue with proposal fetching or filtering."
        )


def _classify_gap(coreprop_found: bool, sigprop_found: bool) -> GapReason:
    if coreprop_found and sigprop_found:
        return GapReason.MATCHING_FAILED
    if coreprop_found:
        return GapReason.SIGPROP_NOT_QUALIFIED
    if sigprop_found:
        return GapReason.COREPROP_NOT_QUALIFIED
    return GapReason.NEITHER_QUALIFIED


class SequenceValidator:
    """Detects and explains gaps in the matched AGIP sequence."""

    def __init__(
        self,
        parser: Optional[SequenceParser] = None,
        recent_window: int = RECENT_WINDOW,
        max_recent_gaps: int = MAX_RECENT_GAPS,
    ):
        self.parser = parser or SequenceParser()
        self.recent_window = recent_window
        self.max_recent_gaps = max_recent_gaps

    def find_missing(self, numbers: Sequence[int]) -> List[int]:
        """Integers in [min, max] absent from numbers, ascending."""
        if len(numbers) < 2:
            return []
        present = set(numbers)
        return [n for n in range(min(numbers), max(numbers) + 1) if n not in present]

    def validate(
        self,
        pairs: Sequence[ProposalPair],
        sigprops: Sequence[Proposal],
        coreprops: Sequence[Proposal],
        raise_on_critical: bool = True,
    ) -> SequenceReport:
        """
        Validate the matched sequence.

        Args:
            pairs: Matched pairs of this run
            sigprops: All qualified sigprops (before matching)
            coreprops: All qualified coreprops (before matching)
            raise_on_critical: Raise SequenceGapError on a recent-gap cluster

        Returns:
            SequenceReport

        Raises:
            SequenceGapError: If more than max_recent_gaps recent numbers are missing
        """
        numbers = [n for n in (self.parser.pair_number(p) for p in pairs) if n is not None]
        numbers.sort(reverse=True)

        report = SequenceReport(numbers=numbers, max_recent_gaps=self.max_recent_gaps)
        logger.info(f"Found AGIPs: {len(numbers)} total")
        if not numbers:
            return report

        report.lowest = numbers[-1]
        report.highest = numbers[0]
        logger.info(f"Range: AGIP {report.lowest} to AGIP {report.highest}")

        report.missing = self.find_missing(numbers)
        if not report.missing:
            logger.info("No gaps detected in AGIP sequence")
            return report

        logger.warning(f"Missing AGIPs detected: {', '.join(str(n) for n in report.missing)}")

        for number in report.missing:
            coreprop_found = any(self.parser.mentions(cp.title, number) for cp in coreprops)
            sigprop_found = any(self.parser.mentions(sp.title, number) for sp in sigprops)
            gap = SequenceGap(
                number=number,
                coreprop_found=coreprop_found,
                sigprop_found=sigprop_found,
                reason=_classify_gap(coreprop_found, sigprop_found),
            )
            report.gaps.append(gap)
            logger.warning(f"  AGIP {number}: {gap.reason.description}")

        recent_threshold = report.highest - self.recent_window
        report.recent_missing = [n for n in report.missing if n > recent_threshold]

        if report.recent_missing:
            logger.warning(
                f"Missing very recent AGIPs: {', '.join(str(n) for n in report.recent_missing)}"
            )

        if report.is_critical and raise_on_critical:
            raise SequenceGapError(report)

        return report
