"""
app/schemas/earnings.py

Pydantic models for the report API and for persisted history.

``AnalysisResultRecord`` is the single wire shape of an analysis snapshot:
the HTTP responses and the on-disk history file both use it, so a snapshot
read back from disk equals the one that was written.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.earnings import (
    AnalysisResult,
    BonusReport,
    FilterState,
    LabelEfficiency,
    LabelSummary,
    VideoEarning,
)


class VideoEarningModel(BaseModel):
    title: str
    label: str
    total_earning: float
    asset_id: str | None = None
    date: str | None = None
    hashtags: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, value: VideoEarning) -> "VideoEarningModel":
        return cls(
            title=value.title,
            label=value.label,
            total_earning=value.total_earning,
            asset_id=value.asset_id,
            date=value.date,
            hashtags=list(value.hashtags),
        )

    def to_domain(self) -> VideoEarning:
        return VideoEarning(
            title=self.title,
            label=self.label,
            total_earning=self.total_earning,
            asset_id=self.asset_id,
            date=self.date,
            hashtags=tuple(self.hashtags),
        )


class LabelSummaryModel(BaseModel):
    label: str
    total_earning: float
    video_count: int = Field(..., ge=0)

    @classmethod
    def from_domain(cls, value: LabelSummary) -> "LabelSummaryModel":
        return cls(label=value.label, total_earning=value.total_earning, video_count=value.video_count)

    def to_domain(self) -> LabelSummary:
        return LabelSummary(label=self.label, total_earning=self.total_earning, video_count=self.video_count)


class AnalysisResultRecord(BaseModel):
    """
    Serialized analysis snapshot.
    """

    id: str
    file_name: str
    created_at: datetime
    video_earnings: list[VideoEarningModel] = Field(default_factory=list)
    label_summaries: list[LabelSummaryModel] = Field(default_factory=list)
    grand_total: float
    low_earning_count: int = Field(..., ge=0)
    start_date: str | None = None
    end_date: str | None = None
    all_hashtags: list[str] = Field(default_factory=list)
    ai_insight: str | None = None
    missing_columns: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, value: AnalysisResult) -> "AnalysisResultRecord":
        return cls(
            id=value.id,
            file_name=value.file_name,
            created_at=value.created_at,
            video_earnings=[VideoEarningModel.from_domain(video) for video in value.video_earnings],
            label_summaries=[LabelSummaryModel.from_domain(label) for label in value.label_summaries],
            grand_total=value.grand_total,
            low_earning_count=value.low_earning_count,
            start_date=value.start_date,
            end_date=value.end_date,
            all_hashtags=list(value.all_hashtags),
            ai_insight=value.ai_insight,
            missing_columns=list(value.missing_columns),
        )

    def to_domain(self) -> AnalysisResult:
        return AnalysisResult(
            id=self.id,
            file_name=self.file_name,
            created_at=self.created_at,
            video_earnings=tuple(video.to_domain() for video in self.video_earnings),
            label_summaries=tuple(label.to_domain() for label in self.label_summaries),
            grand_total=self.grand_total,
            low_earning_count=self.low_earning_count,
            start_date=self.start_date,
            end_date=self.end_date,
            all_hashtags=tuple(self.all_hashtags),
            ai_insight=self.ai_insight,
            missing_columns=tuple(self.missing_columns),
        )


class FilterStateRequest(BaseModel):
    """
    Filter selection sent by the client.

    ``selected_labels=None`` means every label of the base result.
    Omitted bonus inputs fall back to the configured defaults.
    """

    selected_labels: list[str] | None = None
    selected_hashtags: list[str] = Field(default_factory=list)
    hide_low_earning_videos: bool = False
    hide_low_earning_labels: bool = False
    bonus_percentage: float | None = None
    exchange_rate: float | None = None

    def to_filter_state(
        self,
        base: AnalysisResult,
        *,
        default_bonus_percentage: float,
        default_exchange_rate: float,
    ) -> FilterState:
        labels = base.labels if self.selected_labels is None else self.selected_labels
        return FilterState.create(
            selected_labels=labels,
            selected_hashtags=self.selected_hashtags,
            hide_low_earning_videos=self.hide_low_earning_videos,
            hide_low_earning_labels=self.hide_low_earning_labels,
            bonus_percentage=(
                default_bonus_percentage if self.bonus_percentage is None else self.bonus_percentage
            ),
            exchange_rate=default_exchange_rate if self.exchange_rate is None else self.exchange_rate,
        )


class LabelEfficiencyResponse(BaseModel):
    label: str
    total_earning: float
    video_count: int
    efficiency: float
    tier: str
    is_highest: bool
    bonus_amount: float
    converted_amount: float

    @classmethod
    def from_domain(cls, value: LabelEfficiency) -> "LabelEfficiencyResponse":
        return cls(
            label=value.label,
            total_earning=value.total_earning,
            video_count=value.video_count,
            efficiency=value.efficiency,
            tier=value.tier,
            is_highest=value.is_highest,
            bonus_amount=value.bonus_amount,
            converted_amount=value.converted_amount,
        )


class BonusReportResponse(BaseModel):
    rows: list[LabelEfficiencyResponse] = Field(default_factory=list)
    mean_efficiency: float
    bonus_percentage: float
    exchange_rate: float
    total_bonus: float
    total_converted: float
    highest_label: str | None = None

    @classmethod
    def from_domain(cls, value: BonusReport) -> "BonusReportResponse":
        return cls(
            rows=[LabelEfficiencyResponse.from_domain(row) for row in value.rows],
            mean_efficiency=value.mean_efficiency,
            bonus_percentage=value.bonus_percentage,
            exchange_rate=value.exchange_rate,
            total_bonus=value.total_bonus,
            total_converted=value.total_converted,
            highest_label=value.highest_label,
        )


class ReportViewResponse(BaseModel):
    """
    Filtered view of one history entry plus its bonus breakdown.
    """

    result: AnalysisResultRecord
    bonus: BonusReportResponse
