# =============================================================================
# AGIP XP TRACKER - SHARED ENUMS
# =============================================================================
#
# These enums define the shared vocabulary across the system.
# Enum values are the exact strings persisted in the tracking ledger and
# the results file, so renaming a value is a data migration.
#
# =============================================================================

from enum import Enum


class ProposalTrack(Enum):
    """
    The two parallel governance vote tracks.

    SIGPROP:  Signal proposal (temperature check, no tag in the title)
    COREPROP: Core proposal (binding vote, title carries the AGIP tag)

    Membership is decided purely by the title convention.
    """
    SIGPROP = "sigprop"
    COREPROP = "coreprop"


class DropStatus(Enum):
    """
    Lifecycle of an XP drop for one AGIP pair.

    NOT_CREATED: Pair observed, invocation scripts not generated yet
    PENDING:     Scripts exist, on-chain drop not observed yet
    DEPLOYED:    Drop observed (or presumed, for legacy AGIPs)

    Status only moves forward. A DEPLOYED entry is never demoted.
    """
    NOT_CREATED = "not_created"
    PENDING = "pending"
    DEPLOYED = "deployed"


class GapReason(Enum):
    """Why an AGIP number is missing from the matched sequence."""
    SIGPROP_NOT_QUALIFIED = "SIGPROP_NOT_QUALIFIED"
    COREPROP_NOT_QUALIFIED = "COREPROP_NOT_QUALIFIED"
    NEITHER_QUALIFIED = "NEITHER_QUALIFIED"
    MATCHING_FAILED = "MATCHING_FAILED"

    @property
    def description(self) -> str:
        return _GAP_DESCRIPTIONS[self]


_GAP_DESCRIPTIONS = {
    GapReason.SIGPROP_NOT_QUALIFIED: "Coreprop exists but no matching sigprop passed",
    GapReason.COREPROP_NOT_QUALIFIED: "Sigprop exists but no matching coreprop passed",
    GapReason.NEITHER_QUALIFIED: "Neither sigprop nor coreprop found that passed",
    GapReason.MATCHING_FAILED: "Both exist but fuzzy matching failed",
}
