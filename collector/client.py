# =============================================================================
# AGIP XP TRACKER
# Module: collector/client.py
# Purpose: GraphQL client for the Snapshot hub (proposal source)
# =============================================================================
#
# DESIGN:
# - Read-only queries against the public Snapshot GraphQL API
# - Single bounded fetch (no pagination beyond `first`)
# - A failed fetch is fatal for the run; retries are opt-in via max_retries
#
# API REFERENCE:
# Endpoint: https://hub.snapshot.org/graphql
# Queries:  proposals(where: {space}), proposal(id)
#
# =============================================================================

import time
import logging
from typing import Any, Dict, List, Optional

import requests

from .models import Proposal

logger = logging.getLogger(__name__)


PROPOSAL_FIELDS = """
      id
      title
      body
      state
      scores
      scores_total
      votes
      quorum
      created
      end
      author
      choices
      snapshot
      space {
        id
        name
      }
"""

PROPOSALS_QUERY = """
  query GetProposals($space: String!, $first: Int!) {
    proposals(
      where: { space: $space }
      first: $first
      orderBy: "created"
      orderDirection: desc
    ) {%s    }
  }
""" % PROPOSAL_FIELDS

PROPOSAL_QUERY = """
  query GetProposal($id: String!) {
    proposal(id: $id) {%s    }
  }
""" % PROPOSAL_FIELDS


class SnapshotError(RuntimeError):
    """Raised when the Snapshot hub cannot deliver proposals."""


class SnapshotClient:
    """
    HTTP client for the Snapshot GraphQL hub.

    Features:
    - Configurable timeout
    - Optional exponential backoff retries (default: single attempt)
    - GraphQL error payloads surface as SnapshotError
    """

    DEFAULT_ENDPOINT = "https://hub.snapshot.org/graphql"
    DEFAULT_TIMEOUT = 30  # seconds
    MAX_RETRIES = 1
    INITIAL_BACKOFF = 1.0  # seconds
    MAX_BACKOFF = 30.0  # seconds

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the Snapshot client.

        Args:
            endpoint: GraphQL endpoint URL
            timeout: Request timeout in seconds
            max_retries: Total attempts per request (1 = no retry)
            session: Optional requests session (tests inject a mock)
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self.max_retries = max(1, int(max_retries))
        self.session = session or requests.Session()

    def fetch_proposals(self, space: str, first: int = 250) -> List[Proposal]:
        """
        Fetch the most recent proposals of a space, newest first.

        Args:
            space: Snapshot space id (e.g. "aavegotchi.eth")
            first: Upper bound on fetched proposals

        Returns:
            List of Proposal records (may be fewer than requested)

        Raises:
            SnapshotError: If the request fails
        """
        logger.info(f"Fetching latest {first} proposals from {space}...")

        data = self._query(PROPOSALS_QUERY, {"space": space, "first": first})
        nodes = data.get("proposals") or []

        proposals = []
        for node in nodes:
            try:
                proposals.append(Proposal.from_dict(node))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed proposal node: {e}")

        logger.info(f"Total proposals fetched: {len(proposals)}")
        return proposals

    def fetch_proposal(self, proposal_id: str) -> Optional[Proposal]:
        """
        Fetch a single proposal by id.

        Returns:
            The Proposal, or None if the hub does not know the id
        """
        data = self._query(PROPOSAL_QUERY, {"id": proposal_id})
        node = data.get("proposal")
        if not node:
            return None
        return Proposal.from_dict(node)

    def _query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a GraphQL query with optional retry logic.

        Returns:
            The "data" object of the GraphQL response

        Raises:
            SnapshotError: If all attempts fail
        """
        backoff = self.INITIAL_BACKOFF
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                logger.debug(f"Request attempt {attempt + 1}: {self.endpoint}")

                response = self.session.post(
                    self.endpoint,
                    json={"query": query, "variables": variables},
                    timeout=self.timeout,
                    headers={
                        "User-Agent": "AgipXpTracker/1.0",
                        "Accept": "application/json",
                    },
                )
                response.raise_for_status()
                payload = response.json()

                if not isinstance(payload, dict):
                    raise SnapshotError(f"Unexpected response type: {type(payload).__name__}")

                errors = payload.get("errors")
                if errors:
                    messages = "; ".join(
                        str(e.get("message", e)) if isinstance(e, dict) else str(e)
                        for e in errors
                    )
                    # GraphQL errors are deterministic - retrying won't help
                    raise SnapshotError(f"GraphQL error: {messages}")

                return payload.get("data") or {}

            except SnapshotError:
                raise

            except requests.exceptions.HTTPError as e:
                last_error = e
                status = e.response.status_code if e.response is not None else None
                logger.warning(f"HTTP error {status} on attempt {attempt + 1}: {e}")

                # Don't retry client errors (4xx) except 429 (rate limit)
                if status is not None and 400 <= status < 500 and status != 429:
                    raise SnapshotError(f"Client error: {status}") from e

            except requests.exceptions.Timeout as e:
                last_error = e
                logger.warning(f"Timeout after {self.timeout}s on attempt {attempt + 1}")

            except requests.exceptions.RequestException as e:
                last_error = e
                logger.warning(f"Request failed on attempt {attempt + 1}: {e}")

            except ValueError as e:
                last_error = e
                logger.warning(f"JSON decode error on attempt {attempt + 1}: {e}")

            # Exponential backoff before retry
            if attempt < self.max_retries - 1:
                sleep_time = min(backoff, self.MAX_BACKOFF)
                logger.info(f"Retrying in {sleep_time:.1f}s...")
                time.sleep(sleep_time)
                backoff *= 2

        raise SnapshotError(
            f"All {self.max_retries} attempt(s) failed. Last error: {last_error}"
        ) from last_error
