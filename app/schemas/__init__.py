"""
app/schemas package marker.
"""

from app.schemas.earnings import (
    AnalysisResultRecord,
    BonusReportResponse,
    FilterStateRequest,
    LabelEfficiencyResponse,
    LabelSummaryModel,
    ReportViewResponse,
    VideoEarningModel,
)

__all__ = [
    "AnalysisResultRecord",
    "BonusReportResponse",
    "FilterStateRequest",
    "LabelEfficiencyResponse",
    "LabelSummaryModel",
    "ReportViewResponse",
    "VideoEarningModel",
]
