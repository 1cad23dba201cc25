# =============================================================================
# AGIP XP TRACKER
# Module: collector/models.py
# Purpose: Immutable proposal record as delivered by the Snapshot hub
# =============================================================================
#
# The core only ever READS proposals. Nothing downstream mutates them.
#
# =============================================================================

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

BODY_PREVIEW_LENGTH = 200


def _to_iso(epoch_seconds: int) -> str:
    """Render a unix timestamp the way the results file expects it."""
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Proposal:
    """
    One governance proposal.

    scores is ordered like choices. quorum is 0 when the space declares none.
    created/end are unix timestamps (seconds).
    """
    id: str
    title: str
    body: str
    state: str
    scores: Tuple[float, ...]
    scores_total: float
    quorum: float
    created: int
    end: int
    author: str
    choices: Tuple[str, ...]
    space: str
    votes: int = 0
    snapshot: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proposal":
        """
        Create a Proposal from a raw Snapshot GraphQL node.

        Snapshot returns null for unset quorum/scores on some proposals.
        Those are normalized to 0 / empty here.
        Missing id raises KeyError.
        """
        space = data.get("space") or {}
        if isinstance(space, dict):
            space_id = space.get("id") or ""
        else:
            space_id = str(space)

        return cls(
            id=data["id"],
            title=data.get("title") or "",
            body=data.get("body") or "",
            state=data.get("state") or "",
            scores=tuple(float(s) for s in (data.get("scores") or [])),
            scores_total=float(data.get("scores_total") or 0),
            quorum=float(data.get("quorum") or 0),
            created=int(data.get("created") or 0),
            end=int(data.get("end") or 0),
            author=data.get("author") or "",
            choices=tuple(data.get("choices") or []),
            space=space_id,
            votes=int(data.get("votes") or 0),
            snapshot=str(data.get("snapshot") or ""),
        )

    def to_summary(self) -> Dict[str, Any]:
        """Reporting view used in the results file."""
        preview = self.body[:BODY_PREVIEW_LENGTH]
        if len(self.body) > BODY_PREVIEW_LENGTH:
            preview += "..."

        return {
            "id": self.id,
            "title": self.title,
            "state": self.state,
            "votes": self.votes,
            "scores_total": self.scores_total,
            "scores": list(self.scores),
            "quorum": self.quorum,
            "created": _to_iso(self.created),
            "end": _to_iso(self.end),
            "author": self.author,
            "choices": list(self.choices),
            "snapshot": self.snapshot,
            "body_preview": preview,
        }
