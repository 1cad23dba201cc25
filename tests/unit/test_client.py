# =============================================================================
# AGIP XP TRACKER - SNAPSHOT CLIENT UNIT TESTS
# =============================================================================
#
# Tests for the Snapshot GraphQL client with mocked HTTP.
#
# Test categories:
# 1. Proposal record parsing
# 2. Successful queries
# 3. Error handling (GraphQL errors, HTTP failures, retries)
#
# =============================================================================

from unittest.mock import Mock, patch

import pytest
import requests

from collector.client import (
    PROPOSALS_QUERY,
    SnapshotClient,
    SnapshotError,
)
from collector.models import Proposal


def _node(**overrides):
    node = {
        "id": "0xabc",
        "title": "[AGIP-150] Add new wearables",
        "body": "Body text",
        "state": "closed",
        "scores": [8000000, 100],
        "scores_total": 8000100,
        "votes": 312,
        "quorum": 0,
        "created": 1700000000,
        "end": 1700600000,
        "author": "0xauthor",
        "choices": ["For", "Against"],
        "snapshot": "18500000",
        "space": {"id": "aavegotchi.eth", "name": "Aavegotchi"},
    }
    node.update(overrides)
    return node


def _response(payload, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} error", response=response,
        )
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def client(session):
    return SnapshotClient(endpoint="https://hub.example/graphql", session=session)


# =============================================================================
# PROPOSAL PARSING
# =============================================================================


class TestProposalFromDict:

    def test_full_node(self):
        proposal = Proposal.from_dict(_node())

        assert proposal.id == "0xabc"
        assert proposal.scores == (8000000.0, 100.0)
        assert proposal.choices == ("For", "Against")
        assert proposal.space == "aavegotchi.eth"
        assert proposal.votes == 312

    def test_nulls_are_normalized(self):
        proposal = Proposal.from_dict(_node(quorum=None, scores=None, body=None, space=None))

        assert proposal.quorum == 0.0
        assert proposal.scores == ()
        assert proposal.body == ""
        assert proposal.space == ""

    def test_missing_id(self):
        node = _node()
        del node["id"]

        with pytest.raises(KeyError):
            Proposal.from_dict(node)

    def test_summary(self):
        summary = Proposal.from_dict(_node(body="x" * 250)).to_summary()

        assert summary["created"] == "2023-11-14T22:13:20.000Z"
        assert summary["body_preview"] == "x" * 200 + "..."
        assert summary["scores"] == [8000000.0, 100.0]


# =============================================================================
# QUERIES
# =============================================================================


class TestFetchProposals:

    def test_returns_proposals(self, client, session):
        session.post.return_value = _response({"data": {"proposals": [_node()]}})

        proposals = client.fetch_proposals("aavegotchi.eth", first=100)

        assert [p.id for p in proposals] == ["0xabc"]
        _, kwargs = session.post.call_args
        assert kwargs["json"] == {
            "query": PROPOSALS_QUERY,
            "variables": {"space": "aavegotchi.eth", "first": 100},
        }
        assert kwargs["timeout"] == 30

    def test_malformed_node_skipped(self, client, session):
        broken = _node()
        del broken["id"]
        session.post.return_value = _response({"data": {"proposals": [broken, _node(id="0xdef")]}})

        proposals = client.fetch_proposals("aavegotchi.eth")

        assert [p.id for p in proposals] == ["0xdef"]

    def test_empty_result(self, client, session):
        session.post.return_value = _response({"data": {"proposals": []}})

        assert client.fetch_proposals("aavegotchi.eth") == []


class TestFetchProposal:

    def test_found(self, client, session):
        session.post.return_value = _response({"data": {"proposal": _node()}})

        proposal = client.fetch_proposal("0xabc")

        assert proposal.title == "[AGIP-150] Add new wearables"
        _, kwargs = session.post.call_args
        assert kwargs["json"]["variables"] == {"id": "0xabc"}

    def test_not_found(self, client, session):
        session.post.return_value = _response({"data": {"proposal": None}})

        assert client.fetch_proposal("0xmissing") is None


# =============================================================================
# ERROR HANDLING
# =============================================================================


class TestErrorHandling:

    def test_graphql_errors_raise(self, client, session):
        session.post.return_value = _response({"errors": [{"message": "bad query"}]})

        with pytest.raises(SnapshotError, match="bad query"):
            client.fetch_proposals("aavegotchi.eth")

    def test_server_error_raises(self, client, session):
        session.post.return_value = _response({}, status_code=500)

        with pytest.raises(SnapshotError):
            client.fetch_proposals("aavegotchi.eth")
        assert session.post.call_count == 1

    def test_client_error_not_retried(self, session):
        client = SnapshotClient(session=session, max_retries=3)
        session.post.return_value = _response({}, status_code=400)

        with pytest.raises(SnapshotError, match="Client error: 400"):
            client.fetch_proposals("aavegotchi.eth")
        assert session.post.call_count == 1

    def test_connection_error_raises(self, client, session):
        session.post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(SnapshotError):
            client.fetch_proposals("aavegotchi.eth")

    def test_invalid_json_raises(self, client, session):
        response = _response(None)
        response.json.side_effect = ValueError("no json")
        session.post.return_value = response

        with pytest.raises(SnapshotError):
            client.fetch_proposals("aavegotchi.eth")

    @patch("collector.client.time.sleep")
    def test_retry_then_success(self, mock_sleep, session):
        client = SnapshotClient(session=session, max_retries=2)
        session.post.side_effect = [
            requests.exceptions.Timeout("slow"),
            _response({"data": {"proposals": [_node()]}}),
        ]

        proposals = client.fetch_proposals("aavegotchi.eth")

        assert len(proposals) == 1
        assert session.post.call_count == 2
        mock_sleep.assert_called_once_with(1.0)
