# =============================================================================
# AGIP XP TRACKER - LOGGING CONFIGURATION UNIT TESTS
# =============================================================================

import json
import logging

import pytest

from shared.logging_config import AuditLogger, setup_logging


@pytest.fixture(autouse=True)
def restore_root_handlers():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:

    def test_file_output(self, tmp_path):
        log_file = setup_logging(level=logging.DEBUG, console_output=False, log_dir=tmp_path)

        logging.getLogger("tracking.test").info("hello")

        assert log_file.parent == tmp_path
        assert log_file.name.startswith("tracker_")
        assert "hello" in log_file.read_text(encoding="utf-8")

    def test_console_only(self, tmp_path):
        assert setup_logging(file_output=False, log_dir=tmp_path) is None
        assert list(tmp_path.iterdir()) == []


class TestAuditLogger:

    def test_no_file_until_first_event(self, tmp_path):
        audit = AuditLogger(tmp_path)
        audit.close()

        assert not (tmp_path / "audit").exists()

    def test_event_record(self, tmp_path):
        audit = AuditLogger(tmp_path)
        audit.log_event("TRANSITION", "agip_150", {"from": "pending", "to": "deployed"})
        audit.close()

        files = list((tmp_path / "audit").glob("ledger_*.jsonl"))
        record = json.loads(files[0].read_text(encoding="utf-8"))

        assert record["event"] == "TRANSITION"
        assert record["key"] == "agip_150"
        assert record["details"] == {"from": "pending", "to": "deployed"}
        assert record["details_hash"] == AuditLogger._compute_hash(record["details"])

    def test_hash_ignores_key_order(self):
        assert AuditLogger._compute_hash({"a": 1, "b": 2}) == AuditLogger._compute_hash({"b": 2, "a": 1})
