"""Global test fixtures - proposal factories and a fixed clock."""
import itertools

import pytest

from collector.models import Proposal
from pairing.matcher import ProposalPair

FIXED_NOW = "2024-06-01T12:00:00.000Z"

_ids = itertools.count(1)


def build_proposal(
    title="Test proposal",
    body="",
    scores=(100.0, 0.0),
    scores_total=None,
    quorum=0.0,
    proposal_id=None,
    **kwargs,
):
    """Proposal with sensible defaults; scores_total defaults to sum(scores)."""
    if proposal_id is None:
        proposal_id = f"0x{next(_ids):064x}"
    if scores_total is None:
        scores_total = float(sum(scores))

    fields = {
        "id": proposal_id,
        "title": title,
        "body": body,
        "state": "closed",
        "scores": tuple(float(s) for s in scores),
        "scores_total": float(scores_total),
        "quorum": float(quorum),
        "created": 1700000000,
        "end": 1700600000,
        "author": "0x0000000000000000000000000000000000000001",
        "choices": tuple(f"Option {i + 1}" for i in range(len(scores))),
        "space": "aavegotchi.eth",
    }
    fields.update(kwargs)
    return Proposal(**fields)


@pytest.fixture
def make_proposal():
    """Factory fixture for Proposal records."""
    return build_proposal


@pytest.fixture
def make_pair():
    """Factory fixture: a pair whose coreprop title carries the given AGIP number."""

    def _make(number, title="Add new wearables", sigprop_id=None, coreprop_id=None):
        sigprop = build_proposal(title=title, proposal_id=sigprop_id)
        coreprop = build_proposal(
            title=f"[AGIP-{number}] {title}",
            proposal_id=coreprop_id,
        )
        return ProposalPair(sigprop=sigprop, coreprop=coreprop, similarity=1.0)

    return _make


@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW


# Distinct titles keep cross-pair similarity well below the true pairs
AGIP_TITLES = {
    151: "Rebalance FRENS emissions for lending",
    150: "Add a new set of wearables for season five",
    146: "Fund the community art program",
    145: "Raise the rarity farming budget",
}


def agip_proposals(number):
    """Qualified [coreprop, sigprop] for one AGIP number."""
    title = AGIP_TITLES[number]
    coreprop = build_proposal(
        title=f"[AGIP-{number}] {title}",
        body=title,
        scores=(8e6, 1e5),
        proposal_id=f"0xcore{number}",
    )
    sigprop = build_proposal(
        title=title,
        body=title,
        scores=(8e6, 1e5),
        proposal_id=f"0xsig{number}",
    )
    return [coreprop, sigprop]


class StubClient:
    """Proposal source returning a fixed list."""

    def __init__(self, proposals):
        self.proposals = proposals
        self.requested = []

    def fetch_proposals(self, space, first=250):
        self.requested.append((space, first))
        return list(self.proposals[:first])

    def fetch_proposal(self, proposal_id):
        return next((p for p in self.proposals if p.id == proposal_id), None)
