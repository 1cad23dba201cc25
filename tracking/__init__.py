# =============================================================================
# AGIP XP TRACKER - TRACKING
# =============================================================================
#
# The persisted XP drop ledger and everything allowed to change it.
#
# OWNERSHIP:
# Only TrackingReconciler (per run) and mark_deployed (manual CLI) mutate
# ledger entries. Everything else reads.
#
# =============================================================================

from .models import TrackingEntry, Ledger, utc_now_iso
from .storage import LedgerStorage, render_ledger, sort_ledger
from .templates import render_script
from .evidence import ArtifactLayout, DeploymentEvidence
from .reconciler import (
    TrackingReconciler,
    ReconcileSummary,
    derive_status,
    mark_deployed,
    pending_entries,
    status_counts,
)

__all__ = [
    "TrackingEntry",
    "Ledger",
    "utc_now_iso",
    "LedgerStorage",
    "render_ledger",
    "sort_ledger",
    "render_script",
    "ArtifactLayout",
    "DeploymentEvidence",
    "TrackingReconciler",
    "ReconcileSummary",
    "derive_status",
    "mark_deployed",
    "pending_entries",
    "status_counts",
]
