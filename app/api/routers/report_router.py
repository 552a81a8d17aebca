"""
app/api/routers/report_router.py

Earnings report endpoints.

POST   /reports/upload-csv                 ingest one export, return the base result
GET    /reports/history                    most-recent-first history
GET    /reports/history/{id}               one base result
DELETE /reports/history/{id}               drop one result from history
POST   /reports/history/{id}/view          filtered view + bonus breakdown
GET    /reports/history/{id}/export        xlsx (both sheets) or csv (one sheet)

The narrative insight is generated in a background task after the upload
response is sent; clients poll the history entry to pick it up.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status

from app.api.dependencies import CSVUpload, read_csv_upload
from app.config import ReportSettings, get_report_settings
from app.domain.earnings import AnalysisResult, BonusReport, FilteredResult
from app.repositories.history_repository import (
    HistoryNotFoundError,
    HistoryRepository,
    HistoryStorageError,
    get_history_repository,
)
from app.schemas.earnings import (
    AnalysisResultRecord,
    BonusReportResponse,
    FilterStateRequest,
    ReportViewResponse,
)
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    CSVReadError,
    get_csv_ingestion_service,
)
from app.services.efficiency_service import EfficiencyClassifier
from app.services.export_service import (
    LABEL_SHEET_NAME,
    VIDEO_SHEET_NAME,
    ReportExportService,
    get_report_export_service,
)
from app.services.filter_service import recompute
from app.services.insight_service import InsightService, get_insight_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

_VALID_FORMATS = frozenset({"xlsx", "csv"})
_CSV_SHEETS = {"labels": LABEL_SHEET_NAME, "videos": VIDEO_SHEET_NAME}
_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _require_result(repository: HistoryRepository, result_id: str) -> AnalysisResult:
    try:
        return repository.require(result_id)
    except HistoryNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Report {result_id!r} is not in history.",
        ) from exc


def _build_view(
    base: AnalysisResult,
    request: FilterStateRequest,
    settings: ReportSettings,
) -> tuple[FilteredResult, BonusReport]:
    state = request.to_filter_state(
        base,
        default_bonus_percentage=settings.bonus_percentage,
        default_exchange_rate=settings.exchange_rate,
    )
    view = recompute(base, state)
    report = EfficiencyClassifier().classify(
        view,
        bonus_percentage=state.bonus_percentage,
        exchange_rate=state.exchange_rate,
    )
    return view, report


@router.post("/upload-csv", response_model=AnalysisResultRecord)
def upload_csv(
    background_tasks: BackgroundTasks,
    upload: CSVUpload = Depends(read_csv_upload),
    bonus_percentage: float | None = Query(default=None, description="Bonus percentage passed to the insight"),
    ingestion_service: CSVIngestionService = Depends(get_csv_ingestion_service),
    repository: HistoryRepository = Depends(get_history_repository),
    insight_service: InsightService = Depends(get_insight_service),
    settings: ReportSettings = Depends(get_report_settings),
) -> AnalysisResultRecord:
    """
    Ingest one monetization export and store the result in history.
    """

    try:
        result = ingestion_service.analyze_csv(content=upload.content, file_name=upload.file_name)
    except CSVReadError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    try:
        repository.add(result)
    except HistoryStorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Report history could not be saved.",
        ) from exc

    background_tasks.add_task(
        insight_service.attach_insight,
        repository=repository,
        result_id=result.id,
        bonus_percentage=settings.bonus_percentage if bonus_percentage is None else bonus_percentage,
    )
    logger.info("Upload accepted id=%s file=%r", result.id, result.file_name)
    return AnalysisResultRecord.from_domain(result)


@router.get("/history", response_model=list[AnalysisResultRecord])
def list_history(
    repository: HistoryRepository = Depends(get_history_repository),
) -> list[AnalysisResultRecord]:
    return [AnalysisResultRecord.from_domain(result) for result in repository.list_results()]


@router.get("/history/{result_id}", response_model=AnalysisResultRecord)
def get_history_entry(
    result_id: str,
    repository: HistoryRepository = Depends(get_history_repository),
) -> AnalysisResultRecord:
    return AnalysisResultRecord.from_domain(_require_result(repository, result_id))


@router.delete("/history/{result_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_history_entry(
    result_id: str,
    repository: HistoryRepository = Depends(get_history_repository),
) -> Response:
    if not repository.remove(result_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Report {result_id!r} is not in history.",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/history/{result_id}/view", response_model=ReportViewResponse)
def view_history_entry(
    result_id: str,
    request: FilterStateRequest,
    repository: HistoryRepository = Depends(get_history_repository),
    settings: ReportSettings = Depends(get_report_settings),
) -> ReportViewResponse:
    """
    Recompute the filtered view of one result under the given filter state.
    """

    base = _require_result(repository, result_id)
    view, report = _build_view(base, request, settings)
    return ReportViewResponse(
        result=AnalysisResultRecord.from_domain(view),
        bonus=BonusReportResponse.from_domain(report),
    )


@router.get("/history/{result_id}/export", summary="Export a report view as a spreadsheet")
def export_history_entry(
    result_id: str,
    output_format: str = Query(default="xlsx", alias="format", description='"xlsx" or "csv".'),
    sheet: str = Query(default="labels", description='CSV only: "labels" or "videos".'),
    labels: list[str] | None = Query(default=None, description="Selected labels; all when omitted."),
    hashtags: list[str] | None = Query(default=None, description="Selected hashtags."),
    hide_low_earning_videos: bool = Query(default=False),
    hide_low_earning_labels: bool = Query(default=False),
    bonus_percentage: float | None = Query(default=None),
    exchange_rate: float | None = Query(default=None),
    repository: HistoryRepository = Depends(get_history_repository),
    settings: ReportSettings = Depends(get_report_settings),
    export_service: ReportExportService = Depends(get_report_export_service),
) -> Response:
    if output_format not in _VALID_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid format {output_format!r}. Must be one of: {sorted(_VALID_FORMATS)}.",
        )
    if output_format == "csv" and sheet not in _CSV_SHEETS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid sheet {sheet!r}. Must be one of: {sorted(_CSV_SHEETS)}.",
        )

    base = _require_result(repository, result_id)
    request = FilterStateRequest(
        selected_labels=labels,
        selected_hashtags=hashtags or [],
        hide_low_earning_videos=hide_low_earning_videos,
        hide_low_earning_labels=hide_low_earning_labels,
        bonus_percentage=bonus_percentage,
        exchange_rate=exchange_rate,
    )
    view, report = _build_view(base, request, settings)
    sheets = export_service.build_sheets(view, report)

    logger.info(
        "Report export id=%s format=%r videos=%d labels=%d",
        result_id,
        output_format,
        len(view.video_earnings),
        len(view.label_summaries),
    )

    if output_format == "csv":
        filename = export_service.export_file_name("csv")
        return Response(
            content=export_service.to_csv_bytes(sheets[_CSV_SHEETS[sheet]]),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    filename = export_service.export_file_name("xlsx")
    return Response(
        content=export_service.to_xlsx_bytes(sheets),
        media_type=_XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
