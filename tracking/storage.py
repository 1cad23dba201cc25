# =============================================================================
# AGIP XP TRACKER - LEDGER STORAGE
# =============================================================================
#
# FILE:
# xp-drop-tracking.json - mapping "agip_<n>" -> entry, indented JSON,
# keys ordered by AGIP number DESCENDING on every save.
#
# DISCIPLINE:
# Read whole file, mutate in memory, write whole file - once per run.
# There is no locking: never run two tracker instances at the same time.
#
# FAILURE POLICY:
# A missing, unreadable or corrupt ledger loads as an EMPTY ledger.
# Malformed entries are skipped. Both cases are logged.
#
# =============================================================================

import json
import logging
from pathlib import Path
from typing import Dict, Any

from .models import Ledger, TrackingEntry

logger = logging.getLogger(__name__)


def sort_ledger(ledger: Ledger) -> Ledger:
    """Return a new ledger ordered by AGIP number, highest first."""
    ordered_keys = sorted(
        ledger,
        key=lambda key: (ledger[key].agip_number, key),
        reverse=True,
    )
    return {key: ledger[key] for key in ordered_keys}


def render_ledger(ledger: Ledger) -> str:
    """Serialized ledger text exactly as written to disk."""
    data: Dict[str, Any] = {
        key: entry.to_dict() for key, entry in sort_ledger(ledger).items()
    }
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class LedgerStorage:
    """Whole-file JSON persistence for the tracking ledger."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Ledger:
        """
        Load the ledger.

        Returns:
            Ledger mapping (empty when the file is absent or unusable)
        """
        if not self.path.exists():
            logger.info(f"No tracking ledger at {self.path} - starting empty")
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Cannot read tracking ledger {self.path}: {e} - starting empty")
            return {}

        if not isinstance(raw, dict):
            logger.warning(f"Tracking ledger {self.path} is not a mapping - starting empty")
            return {}

        ledger: Ledger = {}
        for key, entry_data in raw.items():
            try:
                ledger[key] = TrackingEntry.from_dict(entry_data)
            except (KeyError, TypeError, ValueError) as e:
                # Skip malformed entries
                logger.warning(f"Skipping malformed ledger entry {key}: {e}")
                continue

        logger.info(f"Loaded tracking ledger: {len(ledger)} AGIPs")
        return ledger

    def save(self, ledger: Ledger) -> Path:
        """
        Replace the ledger file with the given mapping.

        Returns:
            Path to saved file
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.path, 'w', encoding='utf-8') as f:
            f.write(render_ledger(ledger))

        logger.info(f"Tracking data saved to: {self.path} ({len(ledger)} AGIPs)")
        return self.path
