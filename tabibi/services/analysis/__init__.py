"""Analysis (reading) service."""

from tabibi.services.analysis.analyst import AnalysisService

__all__ = ["AnalysisService"]
