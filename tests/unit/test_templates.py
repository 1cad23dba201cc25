# =============================================================================
# AGIP XP TRACKER - SCRIPT TEMPLATE UNIT TESTS
# =============================================================================

import pytest

from tracking.templates import DEPLOY_TASK_NAME, render_script

PROPOSAL_ID = "0xfcf7bb54d0a1ce8a6f5b67e6a8e5f5f2a7f0c2b4e0a3c5e4f3d2b1a0c9e8d7f6"


class TestRenderScript:

    def test_forwards_proposal_id_to_task(self):
        script = render_script(PROPOSAL_ID, is_coreprop=True)

        assert f'"{PROPOSAL_ID}"' in script
        assert f'await run("{DEPLOY_TASK_NAME}", {{' in script
        assert script.startswith('import { run } from "hardhat";')

    def test_coreprop_has_no_export(self):
        script = render_script(PROPOSAL_ID, is_coreprop=True)

        assert "exports.grantXP" not in script
        assert script.endswith("});\n")

    def test_sigprop_exports_granter(self):
        script = render_script(PROPOSAL_ID, is_coreprop=False)

        assert script.endswith("exports.grantXP = addXPDrop;\n")

    def test_deterministic(self):
        assert render_script(PROPOSAL_ID, False) == render_script(PROPOSAL_ID, False)

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            render_script("", is_coreprop=True)
