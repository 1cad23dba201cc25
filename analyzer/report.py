# =============================================================================
# AGIP XP TRACKER
# Module: analyzer/report.py
# Purpose: Run output (results file) and console summaries
# =============================================================================
#
# FILE FORMAT (snapshot-analysis-results.json, overwritten every run):
# {
#   "summary": {...counts, analysis_date},
#   "passed_agips": [...newest first],
#   "matched_pairs": [{pair_number, similarity_percentage, sigprop, coreprop}],
#   "all_qualified_sigprops": [...],
#   "all_qualified_coreprops": [...]
# }
#
# =============================================================================

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from collector.models import Proposal
from pairing.matcher import ProposalPair
from pairing.sequence import SequenceParser, SequenceReport, passed_sequence

logger = logging.getLogger(__name__)


def build_results(
    proposals: Sequence[Proposal],
    sigprops: Sequence[Proposal],
    coreprops: Sequence[Proposal],
    pairs: Sequence[ProposalPair],
    parser: SequenceParser,
    analysis_date: str,
) -> Dict[str, Any]:
    """Assemble the results document of one run."""
    return {
        "summary": {
            "total_proposals_fetched": len(proposals),
            "qualified_proposals": len(sigprops) + len(coreprops),
            "sigprops_count": len(sigprops),
            "coreprops_count": len(coreprops),
            "matched_pairs_count": len(pairs),
            "analysis_date": analysis_date,
        },
        "passed_agips": passed_sequence(pairs, parser),
        "matched_pairs": [
            {
                "pair_number": index,
                "similarity_percentage": pair.similarity_percentage,
                "sigprop": pair.sigprop.to_summary(),
                "coreprop": pair.coreprop.to_summary(),
            }
            for index, pair in enumerate(pairs, 1)
        ],
        "all_qualified_sigprops": [p.to_summary() for p in sigprops],
        "all_qualified_coreprops": [p.to_summary() for p in coreprops],
    }


def save_results(path: Path, results: Dict[str, Any]) -> Path:
    """Write the results file (whole-file replace)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(results, f, indent=2, ensure_ascii=False)

    logger.info(f"Results saved to: {path}")
    return path


def format_sequence_report(report: SequenceReport) -> List[str]:
    """Human-readable gap diagnosis, one line per list item."""
    if not report.numbers:
        return ["No AGIP numbers found in matched pairs."]

    lines = [
        f"Found AGIPs: {len(report.numbers)} total",
        f"Range: AGIP {report.lowest} to AGIP {report.highest}",
    ]

    if not report.missing:
        lines.append("No gaps detected in AGIP sequence.")
        return lines

    lines.append(f"MISSING AGIPs: {', '.join(str(n) for n in report.missing)}")
    for gap in report.gaps:
        lines.append(
            f"  AGIP {gap.number}: coreprop {'found' if gap.coreprop_found else 'not found'}, "
            f"sigprop {'found' if gap.sigprop_found else 'not found'} - {gap.reason.description}"
        )

    if report.recent_missing:
        lines.append(
            f"WARNING: Missing very recent AGIPs: {', '.join(str(n) for n in report.recent_missing)}"
        )

    return lines
