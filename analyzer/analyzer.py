# =============================================================================
# AGIP XP TRACKER
# Module: analyzer/analyzer.py
# Purpose: Run pipeline orchestrating fetch, pairing and tracking
# =============================================================================
#
# PIPELINE:
# 1. Fetch proposals from the Snapshot hub (fatal on failure)
# 2. Keep proposals that reached quorum and passed, split by track
# 3. Greedy-match sigprops to coreprops
# 4. Save the results file
# 5. Validate the AGIP sequence (a recent-gap cluster aborts the run
#    BEFORE the ledger is touched)
# 6. Reconcile and save the tracking ledger
#
# Single-threaded batch run. Callers must never run two at once.
#
# =============================================================================

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from collector.client import SnapshotClient
from collector.models import Proposal
from pairing.matcher import GreedyMatcher, ProposalPair
from pairing.outcome import OutcomeClassifier
from pairing.sequence import SequenceParser, SequenceReport, SequenceValidator
from shared.config import TrackerConfig
from shared.logging_config import AuditLogger
from tracking.models import utc_now_iso
from tracking.reconciler import ReconcileSummary, TrackingReconciler
from tracking.storage import LedgerStorage
from .report import build_results, save_results

logger = logging.getLogger(__name__)


@dataclass
class AnalysisStats:
    """Statistics from an analyzer run."""
    total_fetched: int
    total_qualified: int
    sigprops_count: int
    coreprops_count: int
    pairs: List[ProposalPair]
    sequence: SequenceReport
    reconcile: ReconcileSummary
    results_path: Optional[Path]
    ledger_path: Optional[Path]
    run_duration_seconds: float

    @property
    def matched_pairs_count(self) -> int:
        return len(self.pairs)


class Analyzer:
    """
    Main pipeline class.

    Coordinates:
    - Snapshot client for fetching
    - Outcome classifier for quorum/passing and track split
    - Greedy matcher for pairing
    - Sequence validator for gap diagnostics
    - Tracking reconciler and ledger storage for persistence
    """

    def __init__(
        self,
        config: TrackerConfig,
        client: Optional[SnapshotClient] = None,
        audit: Optional[AuditLogger] = None,
        now: Callable[[], str] = utc_now_iso,
    ):
        """
        Initialize the analyzer.

        Args:
            config: Tracker configuration
            client: Proposal source (defaults to a SnapshotClient from config)
            audit: Ledger audit trail (None disables auditing)
            now: Clock used for ledger and results timestamps
        """
        self.config = config
        self.now = now

        self.client = client or SnapshotClient(
            endpoint=config.snapshot_endpoint,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
        )
        self.parser = SequenceParser(config.proposal_tag)
        self.classifier = OutcomeClassifier.from_config(config)
        self.matcher = GreedyMatcher(tag=config.proposal_tag)
        self.validator = SequenceValidator(
            parser=self.parser,
            recent_window=config.recent_window,
            max_recent_gaps=config.max_recent_gaps,
        )
        self.reconciler = TrackingReconciler.from_config(config, audit=audit, now=now)
        self.storage = LedgerStorage(config.ledger_path)

    def run(self, dry_run: bool = False, limit: Optional[int] = None) -> AnalysisStats:
        """
        Execute the full pipeline.

        Args:
            dry_run: If True, write no results, scripts or ledger
            limit: Override for the number of proposals fetched

        Returns:
            AnalysisStats with run statistics

        Raises:
            SnapshotError: If fetching fails
            SequenceGapError: If too many recent AGIPs are missing
        """
        start_time = datetime.now(timezone.utc)
        fetch_limit = self.config.fetch_limit if limit is None else limit

        logger.info("=" * 60)
        logger.info("AGIP XP TRACKER - Starting run")
        logger.info(f"Space: {self.config.snapshot_space}")
        logger.info(f"Fetch limit: {fetch_limit}")
        logger.info(f"Dry run: {dry_run}")
        logger.info("=" * 60)

        # Step 1: Fetch
        logger.info("Step 1: Fetching proposals...")
        proposals: List[Proposal] = self.client.fetch_proposals(
            self.config.snapshot_space,
            first=fetch_limit,
        )
        logger.info(f"Fetched {len(proposals)} proposals")

        # Step 2: Classify
        logger.info("Step 2: Filtering for quorum + passed...")
        sigprops, coreprops = self.classifier.qualify(proposals)
        logger.info(
            f"Qualified: {len(sigprops) + len(coreprops)} "
            f"(sigprops: {len(sigprops)}, coreprops: {len(coreprops)})"
        )

        # Step 3: Match
        logger.info("Step 3: Matching sigprops to coreprops...")
        pairs = self.matcher.match(sigprops, coreprops)

        # Step 4: Results file
        results_path = None
        if not dry_run:
            results = build_results(
                proposals, sigprops, coreprops, pairs, self.parser, self.now(),
            )
            results_path = save_results(self.config.results_path, results)

        # Step 5: Sequence validation
        logger.info("Step 5: Validating AGIP sequence...")
        sequence = self.validator.validate(pairs, sigprops, coreprops)

        # Step 6: Ledger
        logger.info("Step 6: Reconciling XP drop tracking ledger...")
        ledger = self.storage.load()
        ledger, summary = self.reconciler.reconcile(pairs, ledger, dry_run=dry_run)

        ledger_path = None
        if not dry_run:
            ledger_path = self.storage.save(ledger)

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()

        logger.info("=" * 60)
        logger.info("RUN COMPLETE")
        logger.info(f"Duration: {duration:.1f}s")
        logger.info(f"Matched pairs: {len(pairs)}")
        logger.info("=" * 60)

        return AnalysisStats(
            total_fetched=len(proposals),
            total_qualified=len(sigprops) + len(coreprops),
            sigprops_count=len(sigprops),
            coreprops_count=len(coreprops),
            pairs=pairs,
            sequence=sequence,
            reconcile=summary,
            results_path=results_path,
            ledger_path=ledger_path,
            run_duration_seconds=duration,
        )
