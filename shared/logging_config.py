# =============================================================================
# AGIP XP TRACKER - LOGGING CONFIGURATION
# =============================================================================
#
# Operational logs go to logs/ (console + timestamped file).
# Ledger audit records go to logs/audit/ as JSON lines, one per transition.
# Audit records are write-only: nothing in the system reads them back.
#
# =============================================================================

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _get_project_root() -> Path:
    """Get the project root directory."""
    # This file is at shared/logging_config.py
    return Path(__file__).parent.parent


def _get_log_dir(log_dir: Optional[Path] = None) -> Path:
    if log_dir is not None:
        return Path(log_dir)
    return _get_project_root() / "logs"


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(
    level: int = logging.INFO,
    console_output: bool = True,
    file_output: bool = True,
    log_dir: Optional[Path] = None,
) -> Optional[Path]:
    """
    Configure the root logger for a tracker run.

    Args:
        level: Logging level
        console_output: Whether to log to console
        file_output: Whether to log to a timestamped file
        log_dir: Directory for log files (defaults to <project>/logs)

    Returns:
        Path of the log file, or None when file output is disabled
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    log_file = None
    if file_output:
        directory = _get_log_dir(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = directory / f"tracker_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # Reduce noise from urllib3
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    root.debug("Logging initialized")
    if log_file is not None:
        root.debug(f"Log file: {log_file}")

    return log_file


# =============================================================================
# AUDIT LOGGING
# =============================================================================

class AuditLogger:
    """
    JSON-lines audit trail for ledger mutations.

    Every record carries a SHA-256 hash of its details so a reviewer can
    check that the line was not edited after the fact.
    """

    def __init__(self, log_dir: Optional[Path] = None, name: str = "ledger"):
        self.name = name
        self.audit_dir = _get_log_dir(log_dir) / "audit"
        self.logger = logging.getLogger(f"audit.{name}")
        self.logger.setLevel(logging.INFO)
        # Audit lines must not leak into the operational log
        self.logger.propagate = False
        self._handler: Optional[logging.Handler] = None

    def _ensure_handler(self) -> None:
        """Open the audit file lazily so dry runs never create it."""
        if self._handler is not None:
            return

        self.audit_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d")
        audit_file = self.audit_dir / f"{self.name}_{timestamp}.jsonl"

        self.logger.handlers.clear()
        handler = logging.FileHandler(audit_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(handler)
        self._handler = handler

    @staticmethod
    def _compute_hash(data: dict) -> str:
        """
        Compute SHA-256 hash of input data for traceability.

        Args:
            data: Dictionary to hash

        Returns:
            Hex-encoded SHA-256 hash
        """
        serialized = json.dumps(data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(serialized.encode('utf-8')).hexdigest()

    def log_event(self, event_type: str, key: str, details: Dict[str, Any]) -> None:
        """
        Log one ledger mutation.

        Args:
            event_type: CREATED, TRANSITION, SCRIPTS_WRITTEN, MARK_DEPLOYED
            key: Ledger key (e.g. agip_142)
            details: Event details as a dictionary
        """
        self._ensure_handler()

        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            "key": key,
            "details": details,
            "details_hash": self._compute_hash(details),
        }
        self.logger.info(json.dumps(record, ensure_ascii=False))

    def close(self) -> None:
        if self._handler is not None:
            self._handler.close()
            self.logger.removeHandler(self._handler)
            self._handler = None
