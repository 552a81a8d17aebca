"""
app/services/summary_builder.py

Turns populated aggregation accumulators into the base ``AnalysisResult``.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Sequence

from app.domain.earnings import AnalysisResult, LabelSummary, VideoEarning, is_low_earning
from app.services.aggregation_service import RowAggregator
from app.validators.cell_parser import format_locale_date

logger = logging.getLogger(__name__)


def sort_by_earning_desc(items: Sequence[VideoEarning] | Sequence[LabelSummary]) -> tuple:
    """
    Stable descending sort on ``total_earning``; ties keep discovery order.
    """

    return tuple(sorted(items, key=lambda item: item.total_earning, reverse=True))


class SummaryBuilder:
    """
    Builds immutable analysis snapshots.
    """

    def build(
        self,
        aggregator: RowAggregator,
        *,
        file_name: str,
        missing_columns: Sequence[str] = (),
        result_id: str | None = None,
        created_at: datetime | None = None,
    ) -> AnalysisResult:
        videos: tuple[VideoEarning, ...] = sort_by_earning_desc(aggregator.video_earnings())
        labels: tuple[LabelSummary, ...] = sort_by_earning_desc(aggregator.label_summaries())

        grand_total = sum(video.total_earning for video in videos)
        low_earning_count = sum(1 for video in videos if is_low_earning(video.total_earning))

        start_date: str | None = None
        end_date: str | None = None
        dates = aggregator.dates
        if dates:
            start_date = format_locale_date(min(dates))
            end_date = format_locale_date(max(dates))

        all_hashtags: set[str] = set()
        for video in videos:
            all_hashtags.update(video.hashtags)

        result = AnalysisResult(
            id=result_id or uuid.uuid4().hex,
            file_name=file_name,
            created_at=created_at or datetime.now(tz=timezone.utc),
            video_earnings=videos,
            label_summaries=labels,
            grand_total=grand_total,
            low_earning_count=low_earning_count,
            start_date=start_date,
            end_date=end_date,
            all_hashtags=tuple(sorted(all_hashtags)),
            ai_insight=None,
            missing_columns=tuple(missing_columns),
        )
        logger.info(
            "Built analysis id=%s file=%r videos=%d labels=%d grand_total=%.4f low=%d",
            result.id,
            file_name,
            len(videos),
            len(labels),
            grand_total,
            low_earning_count,
        )
        return result
