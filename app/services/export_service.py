"""
app/services/export_service.py

Spreadsheet export of a report view.

Two sheets, each fully flattened for tabular consumption:

    labels: one row per visible label with efficiency, tier and bonus,
            followed by a grand-total row
    videos: one row per visible video with its hashtags

Amounts are rounded to two decimals here; thousand separators and other
locale formatting are left to the spreadsheet application.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import pandas as pd

from app.domain.earnings import AnalysisResult, BonusReport, is_low_earning
from app.services.efficiency_service import TIER_BASELINE, TIER_MIDDLE, TIER_TOP

LABEL_SHEET_NAME = "Tổng hợp theo nhãn"
VIDEO_SHEET_NAME = "Chi tiết Video"
TOTAL_ROW_LABEL = "TỔNG CỘNG"
MISSING_VALUE = "N/A"

TIER_DISPLAY_NAMES: dict[str, str] = {
    TIER_TOP: "Hiệu quả cao",
    TIER_MIDDLE: "Khá",
    TIER_BASELINE: "Cơ bản",
}

_AMOUNT_DIGITS = 2


# ---------------------------------------------------------------------------
# Export result container
# ---------------------------------------------------------------------------


@dataclass
class ExportResult:
    """
    Flat tabular data ready for CSV or XLSX serialisation.

    Attributes
    ----------
    rows:   Flat dict per row; all values are scalars or strings.
    fields: Ordered column names; deterministic across calls for the same sheet.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=self.fields)


def _amount(value: float) -> float:
    return round(value, _AMOUNT_DIGITS)


def _collect_fields(rows: list[dict[str, Any]]) -> list[str]:
    """
    Union all keys across rows while preserving first-seen insertion order.
    """
    seen: dict[str, None] = {}
    for row in rows:
        for k in row:
            seen.setdefault(k, None)
    return list(seen)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReportExportService:
    """
    Flatten a report view into sheets and serialise them.
    """

    def label_sheet(self, view: AnalysisResult, report: BonusReport) -> ExportResult:
        rows: list[dict[str, Any]] = []
        for item in report.rows:
            rows.append(
                {
                    "Nhãn tùy chỉnh": item.label,
                    "Số lượng Video": item.video_count,
                    "Tổng thu nhập ($)": _amount(item.total_earning),
                    "Hiệu suất ($/video)": _amount(item.efficiency),
                    "Xếp hạng": TIER_DISPLAY_NAMES.get(item.tier, item.tier),
                    "Cao nhất": "★" if item.is_highest else "",
                    f"Thưởng {report.bonus_percentage:g}% ($)": _amount(item.bonus_amount),
                    "Thưởng quy đổi": _amount(item.converted_amount),
                }
            )
        fields = _collect_fields(rows) or [
            "Nhãn tùy chỉnh",
            "Số lượng Video",
            "Tổng thu nhập ($)",
        ]
        total_row: dict[str, Any] = {name: "" for name in fields}
        total_row.update(
            {
                "Nhãn tùy chỉnh": TOTAL_ROW_LABEL,
                "Số lượng Video": len(view.video_earnings),
                "Tổng thu nhập ($)": _amount(view.grand_total),
            }
        )
        if rows:
            bonus_column, converted_column = fields[-2], fields[-1]
            total_row[bonus_column] = _amount(report.total_bonus)
            total_row[converted_column] = _amount(report.total_converted)
        rows.append(total_row)
        return ExportResult(rows=rows, fields=fields)

    def video_sheet(self, view: AnalysisResult) -> ExportResult:
        rows = [
            {
                "Tiêu đề": video.title,
                "Nhãn tùy chỉnh": video.label,
                "ID tài sản video": video.asset_id or MISSING_VALUE,
                "Ngày": video.date or MISSING_VALUE,
                "Hashtag": " ".join(video.hashtags),
                "Thu nhập ($)": _amount(video.total_earning),
                "Thu nhập thấp": "Low" if is_low_earning(video.total_earning) else "",
            }
            for video in view.video_earnings
        ]
        fields = _collect_fields(rows) or [
            "Tiêu đề",
            "Nhãn tùy chỉnh",
            "ID tài sản video",
            "Ngày",
            "Hashtag",
            "Thu nhập ($)",
            "Thu nhập thấp",
        ]
        return ExportResult(rows=rows, fields=fields)

    def build_sheets(self, view: AnalysisResult, report: BonusReport) -> dict[str, ExportResult]:
        return {
            LABEL_SHEET_NAME: self.label_sheet(view, report),
            VIDEO_SHEET_NAME: self.video_sheet(view),
        }

    # ------------------------------------------------------------------
    # Serialisers
    # ------------------------------------------------------------------

    @staticmethod
    def to_xlsx_bytes(sheets: dict[str, ExportResult]) -> bytes:
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            for name, sheet in sheets.items():
                sheet.to_frame().to_excel(writer, index=False, sheet_name=name[:31])
        return buffer.getvalue()

    @staticmethod
    def to_csv_bytes(sheet: ExportResult) -> bytes:
        # BOM so spreadsheet applications detect UTF-8 Vietnamese text.
        return sheet.to_frame().to_csv(index=False).encode("utf-8-sig")

    @staticmethod
    def export_file_name(extension: str, *, today: date | None = None) -> str:
        stamp = (today or date.today()).isoformat()
        return f"Bao_cao_thu_nhap_{stamp}.{extension}"


_service: ReportExportService | None = None


def get_report_export_service() -> ReportExportService:
    global _service
    if _service is None:
        _service = ReportExportService()
    return _service
