"""
app/domain package marker.
"""

from app.domain.earnings import (
    LOW_EARNING_THRESHOLD,
    NO_LABEL,
    AnalysisResult,
    BonusReport,
    FilteredResult,
    FilterState,
    LabelEfficiency,
    LabelSummary,
    NormalizedRow,
    VideoEarning,
    is_low_earning,
)

__all__ = [
    "AnalysisResult",
    "BonusReport",
    "FilteredResult",
    "FilterState",
    "LabelEfficiency",
    "LabelSummary",
    "LOW_EARNING_THRESHOLD",
    "NO_LABEL",
    "NormalizedRow",
    "VideoEarning",
    "is_low_earning",
]
