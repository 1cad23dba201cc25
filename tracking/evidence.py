# =============================================================================
# AGIP XP TRACKER - ARTIFACT LAYOUT & DEPLOYMENT EVIDENCE
# =============================================================================
#
# FILESYSTEM LAYOUT (relative to the workspace root, configurable):
# scripts/airdrops/sigprops/merkle/grantXP_agip<n>.ts           sigprop script
# scripts/airdrops/coreprops/merkle/grantXP_agip<n>_coreprop.ts coreprop script
# scripts/airdrops/xpDrops/<proposal id>                        deployment marker
#
# Markers are left behind by the external deployment task. This module
# only checks that they exist. It never creates or removes one.
#
# =============================================================================

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from shared.config import TrackerConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeploymentEvidence:
    """What the filesystem says about one AGIP pair."""
    sigprop_script: bool
    coreprop_script: bool
    sigprop_marker: bool
    coreprop_marker: bool

    @property
    def both_scripts(self) -> bool:
        return self.sigprop_script and self.coreprop_script

    @property
    def both_markers(self) -> bool:
        return self.sigprop_marker and self.coreprop_marker


class ArtifactLayout:
    """Resolves script and marker locations under a workspace root."""

    def __init__(
        self,
        root: Path,
        sigprop_pattern: str,
        coreprop_pattern: str,
        marker_dir: str,
    ):
        self.root = Path(root)
        self.sigprop_pattern = sigprop_pattern
        self.coreprop_pattern = coreprop_pattern
        self.marker_dir = marker_dir

    @classmethod
    def from_config(cls, config: TrackerConfig) -> "ArtifactLayout":
        return cls(
            root=config.root,
            sigprop_pattern=config.sigprop_script_pattern,
            coreprop_pattern=config.coreprop_script_pattern,
            marker_dir=config.marker_dir,
        )

    def script_refs(self, number: int) -> Tuple[str, str]:
        """Relative (sigprop, coreprop) script references for the ledger."""
        return (
            self.sigprop_pattern.format(number=number),
            self.coreprop_pattern.format(number=number),
        )

    def resolve(self, reference: str) -> Path:
        return self.root / reference

    def marker_path(self, proposal_id: str) -> Path:
        return self.root / self.marker_dir / proposal_id

    def probe(
        self,
        number: int,
        sigprop_id: str,
        coreprop_id: str,
    ) -> DeploymentEvidence:
        sigprop_ref, coreprop_ref = self.script_refs(number)
        evidence = DeploymentEvidence(
            sigprop_script=self.resolve(sigprop_ref).exists(),
            coreprop_script=self.resolve(coreprop_ref).exists(),
            sigprop_marker=self.marker_path(sigprop_id).exists(),
            coreprop_marker=self.marker_path(coreprop_id).exists(),
        )
        logger.debug(f"AGIP {number} evidence: {evidence}")
        return evidence

    def write_script(self, reference: str, content: str) -> bool:
        """
        Write a script unless it already exists.

        Returns:
            True if the file was written, False if it was already there
        """
        path = self.resolve(reference)
        if path.exists():
            return False

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)

        logger.info(f"Created script: {reference}")
        return True
