"""Streamlit frontend for the monetization earnings report."""

from __future__ import annotations

import hashlib
import os
import threading
from typing import Any

import pandas as pd
import streamlit as st

from app.domain.earnings import AnalysisResult, BonusReport, FilteredResult, FilterState, is_low_earning
from app.services.export_service import LABEL_SHEET_NAME, VIDEO_SHEET_NAME, TIER_DISPLAY_NAMES

st.set_page_config(page_title="Báo cáo thu nhập", page_icon="$", layout="wide")


@st.cache_resource(show_spinner=False)
def _load_backend_handles() -> dict[str, Any]:
    """Load backend services lazily to keep startup lightweight."""
    from app.config import get_report_settings  # noqa: PLC0415
    from app.repositories.history_repository import get_history_repository  # noqa: PLC0415
    from app.services.csv_ingestion_service import get_csv_ingestion_service  # noqa: PLC0415
    from app.services.efficiency_service import EfficiencyClassifier  # noqa: PLC0415
    from app.services.export_service import get_report_export_service  # noqa: PLC0415
    from app.services.insight_service import get_insight_service  # noqa: PLC0415

    return {
        "settings": get_report_settings(),
        "history": get_history_repository(),
        "csv_service": get_csv_ingestion_service(),
        "classifier": EfficiencyClassifier(),
        "export_service": get_report_export_service(),
        "insight_service": get_insight_service(),
    }


def _start_insight(result_id: str, bonus_percentage: float) -> None:
    """Generate the insight on a worker thread; the page picks it up on rerun."""
    handles = _load_backend_handles()
    worker = threading.Thread(
        target=handles["insight_service"].attach_insight,
        kwargs={
            "repository": handles["history"],
            "result_id": result_id,
            "bonus_percentage": bonus_percentage,
        },
        daemon=True,
    )
    worker.start()


def _apply_llm_mode(mode: str) -> None:
    """Point the insight adapter at the mock (LOCAL) or OpenAI (CLOUD) backend."""
    from app.config import get_llm_settings  # noqa: PLC0415

    adapter = "mock" if mode == "LOCAL" else "openai"
    if os.environ.get("LLM_ADAPTER") != adapter:
        os.environ["LLM_ADAPTER"] = adapter
        get_llm_settings.cache_clear()


def _build_view(
    base: AnalysisResult,
    *,
    labels: list[str],
    hashtags: list[str],
    hide_videos: bool,
    hide_labels: bool,
    bonus_percentage: float,
    exchange_rate: float,
) -> tuple[FilteredResult, BonusReport]:
    from app.services.filter_service import recompute  # noqa: PLC0415

    handles = _load_backend_handles()
    state = FilterState.create(
        selected_labels=labels,
        selected_hashtags=hashtags,
        hide_low_earning_videos=hide_videos,
        hide_low_earning_labels=hide_labels,
        bonus_percentage=bonus_percentage,
        exchange_rate=exchange_rate,
    )
    view = recompute(base, state)
    report = handles["classifier"].classify(
        view,
        bonus_percentage=bonus_percentage,
        exchange_rate=exchange_rate,
    )
    return view, report


def _label_frame(report: BonusReport) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Nhãn": row.label,
                "Số video": row.video_count,
                "Tổng thu nhập ($)": round(row.total_earning, 2),
                "Hiệu suất ($/video)": round(row.efficiency, 2),
                "Xếp hạng": TIER_DISPLAY_NAMES.get(row.tier, row.tier),
                "Cao nhất": "★" if row.is_highest else "",
                "Thưởng ($)": round(row.bonus_amount, 2),
                "Quy đổi": round(row.converted_amount, 0),
            }
            for row in report.rows
        ]
    )


def _video_frame(view: AnalysisResult) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Tiêu đề": video.title,
                "Nhãn": video.label,
                "ID tài sản": video.asset_id or "N/A",
                "Ngày": video.date or "N/A",
                "Hashtag": " ".join(video.hashtags),
                "Thu nhập ($)": round(video.total_earning, 2),
                "Thấp": "Low" if is_low_earning(video.total_earning) else "",
            }
            for video in view.video_earnings
        ]
    )


if "selected_result_id" not in st.session_state:
    st.session_state.selected_result_id = None
if "last_upload_hash" not in st.session_state:
    st.session_state.last_upload_hash = None
if "upload_error" not in st.session_state:
    st.session_state.upload_error = None


handles = _load_backend_handles()
settings = handles["settings"]
history = handles["history"]

with st.sidebar:
    st.header("Cài đặt")
    mode = st.radio("Insight", options=["LOCAL", "CLOUD"], horizontal=True)
    bonus_percentage = st.number_input(
        "Thưởng (%)",
        min_value=0.0,
        max_value=100.0,
        value=float(settings.bonus_percentage),
        step=1.0,
    )
    exchange_rate = st.number_input(
        "Tỷ giá quy đổi",
        min_value=0.0,
        value=float(settings.exchange_rate),
        step=100.0,
    )

    st.header("Lịch sử")
    entries = history.list_results()
    if not entries:
        st.caption("Chưa có báo cáo nào.")
    for entry in entries:
        hcol1, hcol2 = st.columns([4, 1])
        with hcol1:
            if st.button(
                f"{entry.file_name} · {entry.created_at:%d/%m %H:%M}",
                key=f"open-{entry.id}",
                use_container_width=True,
            ):
                st.session_state.selected_result_id = entry.id
        with hcol2:
            if st.button("✕", key=f"delete-{entry.id}"):
                history.remove(entry.id)
                if st.session_state.selected_result_id == entry.id:
                    st.session_state.selected_result_id = None
                st.rerun()


st.title("Báo cáo thu nhập từ nội dung")

uploaded_file = st.file_uploader("Tải lên tệp CSV", type=["csv"])
if uploaded_file is not None:
    uploaded_bytes = uploaded_file.getvalue()
    upload_hash = hashlib.sha256(uploaded_bytes).hexdigest()
    if upload_hash != st.session_state.last_upload_hash:
        from app.services.csv_ingestion_service import CSVReadError  # noqa: PLC0415

        st.session_state.last_upload_hash = upload_hash
        try:
            with st.spinner("Đang phân tích..."):
                new_result = handles["csv_service"].analyze_csv(
                    content=uploaded_bytes,
                    file_name=uploaded_file.name,
                )
            history.add(new_result)
            st.session_state.selected_result_id = new_result.id
            st.session_state.upload_error = None
            _apply_llm_mode(mode)
            _start_insight(new_result.id, bonus_percentage)
        except CSVReadError as exc:
            st.session_state.upload_error = f"Không thể đọc tệp: {exc}"

if st.session_state.upload_error:
    st.error(st.session_state.upload_error)

base = history.get(st.session_state.selected_result_id) if st.session_state.selected_result_id else None
if base is None:
    st.info("Tải lên tệp CSV hoặc chọn một báo cáo trong lịch sử.")
    st.stop()

if base.missing_columns:
    st.warning("Thiếu cột: " + ", ".join(base.missing_columns))

fcol1, fcol2 = st.columns(2)
with fcol1:
    selected_labels = st.multiselect("Nhãn", options=list(base.labels), default=list(base.labels))
    hide_videos = st.checkbox("Ẩn video thu nhập thấp")
with fcol2:
    selected_hashtags = st.multiselect("Hashtag", options=list(base.all_hashtags))
    hide_labels = st.checkbox("Ẩn nhãn thu nhập thấp")

view, report = _build_view(
    base,
    labels=selected_labels,
    hashtags=selected_hashtags,
    hide_videos=hide_videos,
    hide_labels=hide_labels,
    bonus_percentage=bonus_percentage,
    exchange_rate=exchange_rate,
)

mcol1, mcol2, mcol3, mcol4 = st.columns(4)
mcol1.metric("Tổng thu nhập ($)", f"{view.grand_total:,.2f}")
mcol2.metric("Số video", len(view.video_earnings))
mcol3.metric("Video thu nhập thấp", view.low_earning_count)
mcol4.metric(f"Thưởng {bonus_percentage:g}%", f"{report.total_converted:,.0f}")
if view.start_date and view.end_date:
    st.caption(f"Khoảng thời gian: {view.start_date} - {view.end_date}")

st.subheader("Phân tích AI")
if base.ai_insight:
    st.markdown(base.ai_insight)
else:
    st.caption("Đang tạo phân tích...")
    if st.button("Làm mới"):
        st.rerun()

st.subheader(LABEL_SHEET_NAME)
if report.highest_label:
    st.caption(f"Nhãn hiệu quả nhất: {report.highest_label}")
st.dataframe(_label_frame(report), use_container_width=True)

st.subheader(VIDEO_SHEET_NAME)
st.dataframe(_video_frame(view), use_container_width=True)

export_service = handles["export_service"]
sheets = export_service.build_sheets(view, report)
dcol1, dcol2, dcol3 = st.columns(3)
with dcol1:
    st.download_button(
        label="Tải Excel",
        data=export_service.to_xlsx_bytes(sheets),
        file_name=export_service.export_file_name("xlsx"),
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        use_container_width=True,
    )
with dcol2:
    st.download_button(
        label="Tải CSV theo nhãn",
        data=export_service.to_csv_bytes(sheets[LABEL_SHEET_NAME]),
        file_name=export_service.export_file_name("csv"),
        mime="text/csv",
        use_container_width=True,
    )
with dcol3:
    st.download_button(
        label="Tải CSV video",
        data=export_service.to_csv_bytes(sheets[VIDEO_SHEET_NAME]),
        file_name=export_service.export_file_name("csv"),
        mime="text/csv",
        use_container_width=True,
    )
