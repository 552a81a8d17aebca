"""
app/services package marker.
"""

from app.services.aggregation_service import RowAggregator
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    CSVReadError,
    get_csv_ingestion_service,
)
from app.services.efficiency_service import EfficiencyClassifier
from app.services.export_service import ReportExportService, get_report_export_service
from app.services.filter_service import recompute, unfiltered_view
from app.services.hashtag_extractor import extract_hashtags
from app.services.insight_service import InsightService, get_insight_service
from app.services.summary_builder import SummaryBuilder

__all__ = [
    "CSVIngestionService",
    "CSVReadError",
    "get_csv_ingestion_service",
    "EfficiencyClassifier",
    "InsightService",
    "get_insight_service",
    "ReportExportService",
    "get_report_export_service",
    "RowAggregator",
    "SummaryBuilder",
    "extract_hashtags",
    "recompute",
    "unfiltered_view",
]
