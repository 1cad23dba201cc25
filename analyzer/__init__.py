# =============================================================================
# AGIP XP TRACKER
# Module: analyzer/__init__.py
# Purpose: Run pipeline, results file and command line interface
# =============================================================================

from .analyzer import Analyzer, AnalysisStats
from .report import build_results, save_results, format_sequence_report

__all__ = [
    "Analyzer",
    "AnalysisStats",
    "build_results",
    "save_results",
    "format_sequence_report",
]
