# =============================================================================
# AGIP XP TRACKER - TEST SUITE
# =============================================================================
#
# Layout:
#   tests/
#     unit/           - Unit tests per module (pure logic, tmp_path filesystem)
#     integration/    - Pipeline and CLI runs against a stub proposal source
#
# Usage:
#   pytest                     # all tests
#   pytest tests/unit          # unit tests only
#
# =============================================================================
