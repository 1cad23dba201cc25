# =============================================================================
# AGIP XP TRACKER - ARTIFACT TEMPLATE RENDERER
# =============================================================================
#
# Renders the per-proposal invocation script consumed by the deployment
# toolchain (a hardhat task named deployXPDrop). The script takes no
# arguments and forwards exactly one proposal id.
#
# The renderer is a pure function: (proposal id, track) -> text.
# Writing the file is the reconciler's business.
#
# =============================================================================

DEPLOY_TASK_NAME = "deployXPDrop"

_SCRIPT_TEMPLATE = """import {{ run }} from "hardhat";

async function addXPDrop() {{
  const propId =
    "{proposal_id}";

  await run("{task_name}", {{
    proposalId: propId,
  }});
}}

addXPDrop()
  .then(() => process.exit(0))
  .catch((error) => {{
    console.error(error);
    process.exit(1);
  }});{export_line}
"""

# Sigprop scripts are also imported by the batch granter
_SIGPROP_EXPORT = "\n\nexports.grantXP = addXPDrop;"


def render_script(proposal_id: str, is_coreprop: bool) -> str:
    """
    Render the invocation script for one proposal.

    Args:
        proposal_id: Snapshot proposal id (0x...)
        is_coreprop: True for the coreprop track, False for sigprop

    Returns:
        Script text
    """
    if not proposal_id:
        raise ValueError("proposal_id must not be empty")

    return _SCRIPT_TEMPLATE.format(
        proposal_id=proposal_id,
        task_name=DEPLOY_TASK_NAME,
        export_line="" if is_coreprop else _SIGPROP_EXPORT,
    )
