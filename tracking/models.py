# =============================================================================
# AGIP XP TRACKER - TRACKING LEDGER MODELS
# =============================================================================
#
# One TrackingEntry per AGIP number, keyed "agip_<n>" in the ledger.
#
# LIFECYCLE:
#   not_created -> pending -> deployed
# Entries are never deleted. deployed_date is present only while the
# status is deployed.
#
# SERIALIZATION:
# Field order in to_dict() is fixed so repeated saves are byte-identical.
# Optional fields are omitted when unset.
#
# =============================================================================

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from shared.enums import DropStatus


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class TrackingEntry:
    """Deployment state of the XP drop for one AGIP pair."""
    agip_number: int
    title: str
    status: DropStatus
    sigprop_id: str
    coreprop_id: str
    sigprop_script: Optional[str] = None
    coreprop_script: Optional[str] = None
    created_date: Optional[str] = None
    deployed_date: Optional[str] = None
    tx_hash: Optional[str] = None

    def attach_scripts(self, sigprop_script: str, coreprop_script: str) -> None:
        self.sigprop_script = sigprop_script
        self.coreprop_script = coreprop_script

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {
            "agip_number": self.agip_number,
            "title": self.title,
            "status": self.status.value,
        }
        if self.sigprop_script is not None:
            data["sigprop_script"] = self.sigprop_script
        if self.coreprop_script is not None:
            data["coreprop_script"] = self.coreprop_script
        data["sigprop_id"] = self.sigprop_id
        data["coreprop_id"] = self.coreprop_id
        if self.created_date is not None:
            data["created_date"] = self.created_date
        if self.deployed_date is not None:
            data["deployed_date"] = self.deployed_date
        if self.tx_hash is not None:
            data["tx_hash"] = self.tx_hash
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackingEntry":
        """
        Create an entry from its JSON form.

        Missing required fields raise KeyError, an unknown status
        raises ValueError.
        """
        return cls(
            agip_number=int(data["agip_number"]),
            title=data.get("title", ""),
            status=DropStatus(data["status"]),
            sigprop_id=data["sigprop_id"],
            coreprop_id=data["coreprop_id"],
            sigprop_script=data.get("sigprop_script"),
            coreprop_script=data.get("coreprop_script"),
            created_date=data.get("created_date"),
            deployed_date=data.get("deployed_date"),
            tx_hash=data.get("tx_hash"),
        )


# In-memory ledger: "agip_<n>" -> TrackingEntry
Ledger = Dict[str, TrackingEntry]
