"""
tests/test_export_service.py

Pytest unit tests for ReportExportService.

Covers the label and video sheets, the grand-total row, and both
serialisers (CSV bytes read back with pandas, XLSX read back with openpyxl).
"""

from __future__ import annotations

import io
from datetime import date, datetime, timezone

import pandas as pd
import pytest

from app.domain.earnings import AnalysisResult, FilterState, LabelSummary, VideoEarning
from app.services.efficiency_service import EfficiencyClassifier
from app.services.export_service import (
    LABEL_SHEET_NAME,
    MISSING_VALUE,
    TOTAL_ROW_LABEL,
    VIDEO_SHEET_NAME,
    ReportExportService,
)
from app.services.filter_service import recompute


@pytest.fixture()
def view():
    base = AnalysisResult(
        id="r",
        file_name="export.csv",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        video_earnings=(
            VideoEarning("Video A", "Travel", 30.0, asset_id="111", date="2024-01-05", hashtags=("#beach", "#sun")),
            VideoEarning("Video B", "Travel", 10.0),
            VideoEarning("Video C", "Food", 0.4567),
        ),
        label_summaries=(LabelSummary("Travel", 40.0, 2), LabelSummary("Food", 0.4567, 1)),
        grand_total=40.4567,
        low_earning_count=1,
    )
    return recompute(base, FilterState.select_all(base))


@pytest.fixture()
def report(view):
    return EfficiencyClassifier().classify(view, bonus_percentage=10.0, exchange_rate=25000.0)


@pytest.fixture()
def svc() -> ReportExportService:
    return ReportExportService()


class TestLabelSheet:
    def test_one_row_per_label_plus_total(self, svc, view, report) -> None:
        sheet = svc.label_sheet(view, report)

        assert [row["Nhãn tùy chỉnh"] for row in sheet.rows] == ["Travel", "Food", TOTAL_ROW_LABEL]

    def test_label_row_figures(self, svc, view, report) -> None:
        travel = svc.label_sheet(view, report).rows[0]

        assert travel["Số lượng Video"] == 2
        assert travel["Tổng thu nhập ($)"] == 40.0
        assert travel["Hiệu suất ($/video)"] == 20.0
        assert travel["Xếp hạng"] == "Hiệu quả cao"
        assert travel["Cao nhất"] == "★"
        assert travel["Thưởng 10% ($)"] == 4.0
        assert travel["Thưởng quy đổi"] == 100000.0

    def test_total_row(self, svc, view, report) -> None:
        total = svc.label_sheet(view, report).rows[-1]

        assert total["Số lượng Video"] == 3
        assert total["Tổng thu nhập ($)"] == 40.46
        assert total["Thưởng 10% ($)"] == pytest.approx(4.05)
        assert total["Xếp hạng"] == ""

    def test_empty_view_still_has_total_row(self, svc, view) -> None:
        empty = recompute(view, FilterState.create(selected_labels=[]))
        empty_report = EfficiencyClassifier().classify(empty, bonus_percentage=10.0, exchange_rate=1.0)

        sheet = svc.label_sheet(empty, empty_report)

        assert len(sheet.rows) == 1
        assert sheet.rows[0]["Nhãn tùy chỉnh"] == TOTAL_ROW_LABEL
        assert sheet.rows[0]["Tổng thu nhập ($)"] == 0


class TestVideoSheet:
    def test_rows_follow_view_order(self, svc, view) -> None:
        sheet = svc.video_sheet(view)

        assert [row["Tiêu đề"] for row in sheet.rows] == ["Video A", "Video B", "Video C"]

    def test_missing_values_and_low_marker(self, svc, view) -> None:
        rows = svc.video_sheet(view).rows

        assert rows[0]["Hashtag"] == "#beach #sun"
        assert rows[1]["ID tài sản video"] == MISSING_VALUE
        assert rows[1]["Ngày"] == MISSING_VALUE
        assert rows[2]["Thu nhập ($)"] == 0.46
        assert rows[2]["Thu nhập thấp"] == "Low"
        assert rows[0]["Thu nhập thấp"] == ""


class TestSerialisers:
    def test_csv_bytes_have_bom_and_read_back(self, svc, view) -> None:
        payload = svc.to_csv_bytes(svc.video_sheet(view))

        assert payload.startswith(b"\xef\xbb\xbf")
        frame = pd.read_csv(io.BytesIO(payload), encoding="utf-8-sig")
        assert list(frame["Tiêu đề"]) == ["Video A", "Video B", "Video C"]

    def test_xlsx_has_both_sheets(self, svc, view, report) -> None:
        from openpyxl import load_workbook

        payload = svc.to_xlsx_bytes(svc.build_sheets(view, report))

        workbook = load_workbook(io.BytesIO(payload))
        assert workbook.sheetnames == [LABEL_SHEET_NAME, VIDEO_SHEET_NAME]
        assert workbook[LABEL_SHEET_NAME]["A1"].value == "Nhãn tùy chỉnh"

    def test_export_file_name(self, svc) -> None:
        assert svc.export_file_name("xlsx", today=date(2024, 3, 9)) == "Bao_cao_thu_nhap_2024-03-09.xlsx"
