# =============================================================================
# AGIP XP TRACKER
# Module: collector/__init__.py
# Purpose: Proposal source (Snapshot hub) and the proposal record
# =============================================================================
#
# STRICT SEPARATION:
# This package only FETCHES proposals. It does not classify, match or
# persist anything.
#
# =============================================================================

from .models import Proposal
from .client import SnapshotClient, SnapshotError

__all__ = [
    "Proposal",
    "SnapshotClient",
    "SnapshotError",
]
