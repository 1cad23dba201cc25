# =============================================================================
# AGIP XP TRACKER - SHARED MODULE
# =============================================================================
#
# Shared utilities used by every package. No business logic lives here.
#
# CONTENTS:
# - Enums (shared type definitions)
# - Configuration loading (YAML + .env)
# - Logging utilities and the ledger audit trail
#
# =============================================================================

from .enums import ProposalTrack, DropStatus, GapReason
from .config import TrackerConfig, ConfigError, load_config
from .logging_config import setup_logging, AuditLogger

__all__ = [
    "ProposalTrack",
    "DropStatus",
    "GapReason",
    "TrackerConfig",
    "ConfigError",
    "load_config",
    "setup_logging",
    "AuditLogger",
]
