# =============================================================================
# AGIP XP TRACKER - CONFIGURATION
# =============================================================================
#
# Reads config/tracker.yaml and applies environment overrides from .env.
#
# USAGE:
#   from shared.config import load_config
#
#   config = load_config()
#   ledger = config.ledger_path
#
# ENVIRONMENT OVERRIDES:
#   SNAPSHOT_ENDPOINT        GraphQL endpoint of the Snapshot hub
#   SNAPSHOT_SPACE           Governance space id
#   AGIP_TRACKER_ROOT        Workspace root for scripts, markers and ledger
#   AGIP_TRACKER_LOG_LEVEL   DEBUG / INFO / WARNING
#
# =============================================================================

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Base directory
BASE_DIR = Path(__file__).parent.parent
CONFIG_PATH = BASE_DIR / "config" / "tracker.yaml"
ENV_PATH = BASE_DIR / ".env"


class ConfigError(RuntimeError):
    """Raised when the configuration file exists but cannot be used."""


@dataclass
class TrackerConfig:
    """
    All tunables of a tracker run.

    Relative paths are resolved against workspace_root.
    """
    # Proposal source
    snapshot_endpoint: str = "https://hub.snapshot.org/graphql"
    snapshot_space: str = "aavegotchi.eth"
    fetch_limit: int = 250
    request_timeout: int = 30
    max_retries: int = 1

    # Outcome classification
    # NOTE: fallback quorum choice is a heuristic standing in for a
    # date-based rule. Keep both values in sync with the DAO charter.
    newer_quorum: float = 7.2e6
    older_quorum: float = 9e6
    proposal_tag: str = "AGIP"

    # Sequence validation
    recent_window: int = 5
    max_recent_gaps: int = 2

    # Tracking
    legacy_cutoff: int = 141
    workspace_root: str = "."
    ledger_file: str = "scripts/xp-drop-tracking.json"
    results_file: str = "scripts/snapshot-analysis-results.json"
    sigprop_script_pattern: str = "scripts/airdrops/sigprops/merkle/grantXP_agip{number}.ts"
    coreprop_script_pattern: str = "scripts/airdrops/coreprops/merkle/grantXP_agip{number}_coreprop.ts"
    marker_dir: str = "scripts/airdrops/xpDrops"

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    @property
    def root(self) -> Path:
        return Path(self.workspace_root)

    def resolve(self, relative: str) -> Path:
        """Resolve a configured path against the workspace root."""
        path = Path(relative)
        if path.is_absolute():
            return path
        return self.root / path

    @property
    def ledger_path(self) -> Path:
        return self.resolve(self.ledger_file)

    @property
    def results_path(self) -> Path:
        return self.resolve(self.results_file)

    @property
    def log_path(self) -> Path:
        return self.resolve(self.log_dir)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackerConfig":
        """Build a config from a flat mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})


def _flatten(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten the sectioned YAML layout into TrackerConfig field names.

    Sections (snapshot:, classification:, ...) are only for readability;
    field names are unique across sections.
    """
    flat: Dict[str, Any] = {}
    for key, value in raw.items():
        if isinstance(value, dict):
            flat.update(value)
        else:
            flat[key] = value
    return flat


def _apply_env_overrides(data: Dict[str, Any]) -> None:
    overrides = {
        "SNAPSHOT_ENDPOINT": "snapshot_endpoint",
        "SNAPSHOT_SPACE": "snapshot_space",
        "AGIP_TRACKER_ROOT": "workspace_root",
        "AGIP_TRACKER_LOG_LEVEL": "log_level",
    }
    for env_var, field_name in overrides.items():
        value = os.getenv(env_var)
        if value:
            data[field_name] = value
            logger.debug(f"Config override from {env_var}")


def load_config(
    config_path: Optional[Path] = None,
    env_file: Optional[Path] = None,
) -> TrackerConfig:
    """
    Load the tracker configuration.

    Args:
        config_path: Path to tracker.yaml. Defaults to config/tracker.yaml
        env_file: Path to a .env file. Defaults to <project>/.env

    Returns:
        TrackerConfig with file values and environment overrides applied

    Raises:
        ConfigError: If the YAML file exists but cannot be parsed
    """
    config_path = Path(config_path) if config_path else CONFIG_PATH
    env_file = Path(env_file) if env_file else ENV_PATH

    if env_file.exists():
        load_dotenv(env_file, override=False)

    data: Dict[str, Any] = {}
    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path} - using defaults")
    else:
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {config_path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        data = _flatten(raw)

    _apply_env_overrides(data)
    return TrackerConfig.from_dict(data)
