"""
app/domain/earnings.py

Domain models for the earnings report pipeline.

Everything here is immutable. ``AnalysisResult`` is produced once per
ingested file; ``FilteredResult`` is derived from it on every filter change
and carries the unfiltered label totals along so the low-earning label
check always looks at pre-filter values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Final, Iterable

NO_LABEL: Final[str] = "Không có nhãn"
"""Label assigned to rows whose custom label is absent or blank."""

LOW_EARNING_THRESHOLD: Final[float] = 1.0
"""Earnings strictly below this amount count as low-earning everywhere."""


def is_low_earning(amount: float) -> bool:
    """Return True when *amount* is below the shared low-earning threshold."""
    return amount < LOW_EARNING_THRESHOLD


@dataclass(frozen=True)
class NormalizedRow:
    """
    One raw spreadsheet row mapped onto canonical fields.
    """

    title: str | None
    label: str
    asset_id: str | None
    date_text: str | None
    description: str
    earning: float


@dataclass(frozen=True)
class VideoEarning:
    """
    Aggregated earnings for one ``(title, label)`` video key.
    """

    title: str
    label: str
    total_earning: float
    asset_id: str | None = None
    date: str | None = None
    hashtags: tuple[str, ...] = ()

    @property
    def key(self) -> tuple[str, str]:
        return (self.title, self.label)


@dataclass(frozen=True)
class LabelSummary:
    label: str
    total_earning: float
    video_count: int


@dataclass(frozen=True)
class AnalysisResult:
    """
    Immutable snapshot produced by one ingestion pass.
    """

    id: str
    file_name: str
    created_at: datetime
    video_earnings: tuple[VideoEarning, ...]
    label_summaries: tuple[LabelSummary, ...]
    grand_total: float
    low_earning_count: int
    start_date: str | None = None
    end_date: str | None = None
    all_hashtags: tuple[str, ...] = ()
    ai_insight: str | None = None
    missing_columns: tuple[str, ...] = ()

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(summary.label for summary in self.label_summaries)


@dataclass(frozen=True)
class FilteredResult(AnalysisResult):
    """
    View of an ``AnalysisResult`` under one ``FilterState``.

    ``base_label_summaries`` keeps the label totals of the unfiltered result
    so that re-filtering a filtered view reproduces the same output.
    """

    base_label_summaries: tuple[LabelSummary, ...] = ()


@dataclass(frozen=True)
class FilterState:
    """
    Current label/hashtag/threshold selection plus bonus inputs.
    """

    selected_labels: frozenset[str] = frozenset()
    selected_hashtags: frozenset[str] = frozenset()
    hide_low_earning_videos: bool = False
    hide_low_earning_labels: bool = False
    bonus_percentage: float = 0.0
    exchange_rate: float = 1.0

    @classmethod
    def create(
        cls,
        *,
        selected_labels: Iterable[str] = (),
        selected_hashtags: Iterable[str] = (),
        hide_low_earning_videos: bool = False,
        hide_low_earning_labels: bool = False,
        bonus_percentage: float = 0.0,
        exchange_rate: float = 1.0,
    ) -> "FilterState":
        return cls(
            selected_labels=frozenset(selected_labels),
            selected_hashtags=frozenset(tag.lower() for tag in selected_hashtags),
            hide_low_earning_videos=hide_low_earning_videos,
            hide_low_earning_labels=hide_low_earning_labels,
            bonus_percentage=bonus_percentage,
            exchange_rate=exchange_rate,
        )

    @classmethod
    def select_all(
        cls,
        base: AnalysisResult,
        *,
        bonus_percentage: float = 0.0,
        exchange_rate: float = 1.0,
    ) -> "FilterState":
        """Every label selected, no hashtag filter, nothing hidden."""
        return cls.create(
            selected_labels=base.labels,
            bonus_percentage=bonus_percentage,
            exchange_rate=exchange_rate,
        )


@dataclass(frozen=True)
class LabelEfficiency:
    """
    Per-label efficiency, tier and bonus figures for one filtered view.
    """

    label: str
    total_earning: float
    video_count: int
    efficiency: float
    tier: str
    is_highest: bool
    bonus_amount: float
    converted_amount: float


@dataclass(frozen=True)
class BonusReport:
    rows: tuple[LabelEfficiency, ...]
    mean_efficiency: float
    bonus_percentage: float
    exchange_rate: float
    total_bonus: float = 0.0
    total_converted: float = 0.0
    highest_label: str | None = field(default=None)
