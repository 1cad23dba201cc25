# =============================================================================
# AGIP XP TRACKER - TRACKING RECONCILER
# =============================================================================
#
# Merges the matched pairs of a run into the tracking ledger, using the
# filesystem as deployment evidence.
#
# STATUS DERIVATION (two regimes, split at legacy_cutoff):
#   AGIP <= cutoff:  deployed  <=> both scripts exist
#                    (older drops were deployed out of band)
#   AGIP >  cutoff:  deployed  <=> both deployment markers exist
#                    pending   <=> both scripts exist and not deployed
#
# TRANSITIONS FOR AN EXISTING ENTRY (first match wins):
#   (a) deployed evidence, entry not deployed      -> deployed, stamp date
#   (b) pending evidence, entry not pending        -> pending, clear date
#   (c) no evidence but both scripts on disk       -> pending, clear date
# (b) and (c) never touch a deployed entry: missing markers alone do not
# demote anything.
#
# An entry that ends up not_created gets its two scripts generated and
# moves to pending in the same run.
#
# IDEMPOTENCE:
# Timestamps are only written on an actual transition, so a re-run on
# unchanged evidence leaves the ledger byte-identical.
#
# =============================================================================

import copy
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from pairing.matcher import ProposalPair
from pairing.sequence import SequenceParser
from shared.config import TrackerConfig
from shared.enums import DropStatus
from shared.logging_config import AuditLogger
from .evidence import ArtifactLayout, DeploymentEvidence
from .models import Ledger, TrackingEntry, utc_now_iso
from .templates import render_script

logger = logging.getLogger(__name__)

LEGACY_CUTOFF = 141


def derive_status(
    number: int,
    evidence: DeploymentEvidence,
    legacy_cutoff: int = LEGACY_CUTOFF,
) -> Tuple[bool, bool]:
    """
    Derive (is_deployed, is_pending) from filesystem evidence.

    Legacy AGIPs are never pending: either both scripts exist and the
    drop counts as deployed, or nothing is known yet.
    """
    if number <= legacy_cutoff:
        return evidence.both_scripts, False

    is_deployed = evidence.both_markers
    is_pending = evidence.both_scripts and not is_deployed
    return is_deployed, is_pending


def status_counts(ledger: Ledger) -> Dict[str, int]:
    """Number of ledger entries per status value."""
    counts = Counter(entry.status.value for entry in ledger.values())
    return dict(sorted(counts.items()))


def pending_entries(ledger: Ledger) -> List[TrackingEntry]:
    """Pending entries in deployment order (lowest AGIP first)."""
    pending = [e for e in ledger.values() if e.status is DropStatus.PENDING]
    pending.sort(key=lambda e: e.agip_number)
    return pending


def mark_deployed(
    ledger: Ledger,
    key: str,
    tx_hashes: Optional[Iterable[str]] = None,
    now: Callable[[], str] = utc_now_iso,
) -> TrackingEntry:
    """
    Record an externally performed deployment.

    Raises:
        KeyError: If the ledger has no entry for key
    """
    if key not in ledger:
        raise KeyError(f"No tracking entry for {key}")

    entry = ledger[key]
    # Repeated marks keep the first deployment time
    if entry.status is not DropStatus.DEPLOYED or entry.deployed_date is None:
        entry.deployed_date = now()
    entry.status = DropStatus.DEPLOYED

    hashes = [h for h in (tx_hashes or []) if h]
    if hashes:
        entry.tx_hash = ",".join(hashes)

    return entry


@dataclass
class ReconcileSummary:
    """Statistics from one reconciliation pass."""
    created: int = 0
    updated: int = 0
    skipped: int = 0
    scripts_written: int = 0
    transitions: List[Tuple[str, str, str]] = field(default_factory=list)
    status_counts: Dict[str, int] = field(default_factory=dict)
    dry_run: bool = False


class TrackingReconciler:
    """
    Owns every mutation of the tracking ledger during a run.

    The ledger is passed in explicitly and mutated in place (or a copy
    of it, for dry runs). Loading and saving is the caller's job.
    """

    def __init__(
        self,
        layout: ArtifactLayout,
        parser: Optional[SequenceParser] = None,
        legacy_cutoff: int = LEGACY_CUTOFF,
        audit: Optional[AuditLogger] = None,
        now: Callable[[], str] = utc_now_iso,
    ):
        self.layout = layout
        self.parser = parser or SequenceParser()
        self.legacy_cutoff = legacy_cutoff
        self.audit = audit
        self.now = now

    @classmethod
    def from_config(
        cls,
        config: TrackerConfig,
        audit: Optional[AuditLogger] = None,
        now: Callable[[], str] = utc_now_iso,
    ) -> "TrackingReconciler":
        return cls(
            layout=ArtifactLayout.from_config(config),
            parser=SequenceParser(config.proposal_tag),
            legacy_cutoff=config.legacy_cutoff,
            audit=audit,
            now=now,
        )

    def _audit(self, event: str, key: str, details: dict, dry_run: bool) -> None:
        if self.audit is not None and not dry_run:
            self.audit.log_event(event, key, details)

    def reconcile(
        self,
        pairs: Sequence[ProposalPair],
        ledger: Ledger,
        dry_run: bool = False,
    ) -> Tuple[Ledger, ReconcileSummary]:
        """
        Merge pairs into the ledger.

        Args:
            pairs: Matched pairs of this run
            ledger: Previously persisted ledger (empty if none)
            dry_run: Work on a copy and write no scripts

        Returns:
            (resulting ledger, ReconcileSummary)
        """
        working = copy.deepcopy(ledger) if dry_run else ledger
        summary = ReconcileSummary(dry_run=dry_run)

        for pair in pairs:
            number = self.parser.pair_number(pair)
            if number is None:
                logger.debug(f"No AGIP number in coreprop title: {pair.coreprop.title[:60]}")
                summary.skipped += 1
                continue
            self._reconcile_pair(pair, number, working, summary, dry_run)

        summary.status_counts = status_counts(working)

        logger.info("XP Drop Script Summary:")
        logger.info(f"   - New entries created: {summary.created}")
        logger.info(f"   - Existing entries updated: {summary.updated}")
        logger.info(f"   - Scripts written: {summary.scripts_written}")
        logger.info(f"   - Total tracked AGIPs: {len(working)}")
        for status, count in summary.status_counts.items():
            logger.info(f"   {status}: {count}")

        return working, summary

    def _reconcile_pair(
        self,
        pair: ProposalPair,
        number: int,
        ledger: Ledger,
        summary: ReconcileSummary,
        dry_run: bool,
    ) -> None:
        key = self.parser.ledger_key(number)
        title = self.parser.clean_title(pair.coreprop.title)
        sigprop_ref, coreprop_ref = self.layout.script_refs(number)

        evidence = self.layout.probe(number, pair.sigprop.id, pair.coreprop.id)
        is_deployed, is_pending = derive_status(number, evidence, self.legacy_cutoff)

        entry = ledger.get(key)
        if entry is None:
            if is_deployed:
                status = DropStatus.DEPLOYED
            elif is_pending:
                status = DropStatus.PENDING
            else:
                status = DropStatus.NOT_CREATED

            entry = TrackingEntry(
                agip_number=number,
                title=title,
                status=status,
                sigprop_id=pair.sigprop.id,
                coreprop_id=pair.coreprop.id,
                created_date=self.now(),
            )
            if evidence.both_scripts:
                entry.attach_scripts(sigprop_ref, coreprop_ref)
            if is_deployed:
                entry.deployed_date = self.now()

            ledger[key] = entry
            summary.created += 1
            self._audit("CREATED", key, {"status": status.value, "title": title}, dry_run)
        else:
            # Titles and ids may have been corrected upstream
            entry.title = title
            entry.sigprop_id = pair.sigprop.id
            entry.coreprop_id = pair.coreprop.id
            self._apply_transitions(key, entry, evidence, is_deployed, is_pending, summary, dry_run)
            summary.updated += 1

        if entry.status is DropStatus.NOT_CREATED:
            self._create_scripts(key, pair, entry, evidence, summary, dry_run)

    def _apply_transitions(
        self,
        key: str,
        entry: TrackingEntry,
        evidence: DeploymentEvidence,
        is_deployed: bool,
        is_pending: bool,
        summary: ReconcileSummary,
        dry_run: bool,
    ) -> None:
        previous = entry.status
        sigprop_ref, coreprop_ref = self.layout.script_refs(entry.agip_number)

        if is_deployed and previous is not DropStatus.DEPLOYED:
            entry.status = DropStatus.DEPLOYED
            if evidence.both_scripts:
                entry.attach_scripts(sigprop_ref, coreprop_ref)
            entry.deployed_date = self.now()
        elif previous is DropStatus.DEPLOYED:
            return
        elif is_pending and previous is not DropStatus.PENDING:
            entry.status = DropStatus.PENDING
            entry.attach_scripts(sigprop_ref, coreprop_ref)
            # A deployed_date here was stamped in error
            entry.deployed_date = None
        elif not is_deployed and not is_pending and evidence.both_scripts:
            entry.status = DropStatus.PENDING
            entry.attach_scripts(sigprop_ref, coreprop_ref)
            entry.deployed_date = None

        if entry.status is not previous:
            summary.transitions.append((key, previous.value, entry.status.value))
            logger.info(f"AGIP {entry.agip_number}: {previous.value} -> {entry.status.value}")
            self._audit(
                "TRANSITION",
                key,
                {"from": previous.value, "to": entry.status.value},
                dry_run,
            )

    def _create_scripts(
        self,
        key: str,
        pair: ProposalPair,
        entry: TrackingEntry,
        evidence: DeploymentEvidence,
        summary: ReconcileSummary,
        dry_run: bool,
    ) -> None:
        sigprop_ref, coreprop_ref = self.layout.script_refs(entry.agip_number)

        if dry_run:
            would_write = int(not evidence.sigprop_script) + int(not evidence.coreprop_script)
            summary.scripts_written += would_write
            logger.info(f"DRY RUN - would create {would_write} script(s) for AGIP {entry.agip_number}")
            return

        written = []
        if self.layout.write_script(sigprop_ref, render_script(pair.sigprop.id, is_coreprop=False)):
            written.append(sigprop_ref)
        if self.layout.write_script(coreprop_ref, render_script(pair.coreprop.id, is_coreprop=True)):
            written.append(coreprop_ref)
        summary.scripts_written += len(written)

        # Scripts now exist - ready for deployment
        entry.status = DropStatus.PENDING
        entry.attach_scripts(sigprop_ref, coreprop_ref)

        summary.transitions.append((key, DropStatus.NOT_CREATED.value, DropStatus.PENDING.value))
        self._audit("SCRIPTS_WRITTEN", key, {"scripts": written}, dry_run)
