"""
tests/test_aggregation_service.py

Pytest unit tests for RowAggregator and SummaryBuilder.

Coverage
--------
- (title, label) keying, including same title under two labels
- Merge rules: earning sum, first asset id, hashtag union, first date
- Untitled rows skipped for aggregation but counted for the date range
- Label totals and distinct-title counts
- Stable descending sort with ties in discovery order
- Grand total, low-earning count, date range, hashtag universe
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.domain.earnings import NormalizedRow
from app.services.aggregation_service import RowAggregator
from app.services.summary_builder import SummaryBuilder


def _row(
    title: str | None,
    label: str = "L1",
    earning: float = 0.0,
    *,
    asset_id: str | None = None,
    date_text: str | None = None,
    description: str = "",
) -> NormalizedRow:
    return NormalizedRow(
        title=title,
        label=label,
        asset_id=asset_id,
        date_text=date_text,
        description=description,
        earning=earning,
    )


def _build(rows: list[NormalizedRow]):
    aggregator = RowAggregator().add_all(rows)
    return SummaryBuilder().build(
        aggregator,
        file_name="export.csv",
        result_id="fixed-id",
        created_at=datetime(2024, 2, 1, tzinfo=timezone.utc),
    )


# ---------------------------------------------------------------------------
# RowAggregator
# ---------------------------------------------------------------------------


class TestRowAggregator:
    def test_same_title_and_label_merge_into_one_video(self) -> None:
        aggregator = RowAggregator().add_all([_row("A", earning=1500.0), _row("A", earning=2.0)])

        videos = aggregator.video_earnings()

        assert len(videos) == 1
        assert videos[0].total_earning == 1502.0

    def test_same_title_under_two_labels_is_two_videos(self) -> None:
        aggregator = RowAggregator().add_all([_row("A", "L1", 1.0), _row("A", "L2", 2.0)])

        keys = [video.key for video in aggregator.video_earnings()]

        assert keys == [("A", "L1"), ("A", "L2")]

    def test_asset_id_is_filled_once_and_never_overwritten(self) -> None:
        aggregator = RowAggregator().add_all(
            [
                _row("A"),
                _row("A", asset_id="first"),
                _row("A", asset_id="second"),
            ]
        )

        assert aggregator.video_earnings()[0].asset_id == "first"

    def test_date_keeps_value_of_the_creating_row(self) -> None:
        aggregator = RowAggregator().add_all(
            [
                _row("A", date_text="2024-01-10"),
                _row("A", date_text="2024-01-01"),
            ]
        )

        assert aggregator.video_earnings()[0].date == "2024-01-10"

    def test_hashtags_union_in_first_seen_order(self) -> None:
        aggregator = RowAggregator().add_all(
            [
                _row("A", description="#One #two"),
                _row("A", description="#TWO #three"),
            ]
        )

        assert aggregator.video_earnings()[0].hashtags == ("#one", "#two", "#three")

    def test_untitled_rows_are_skipped_but_their_dates_are_collected(self) -> None:
        aggregator = RowAggregator().add_all(
            [
                _row("A", earning=5.0, date_text="2024-01-10"),
                _row(None, earning=100.0, date_text="2023-12-31"),
            ]
        )

        assert aggregator.rows_seen == 2
        assert aggregator.rows_skipped == 1
        assert [video.title for video in aggregator.video_earnings()] == ["A"]
        assert min(aggregator.dates) == datetime(2023, 12, 31, tzinfo=timezone.utc)

    def test_label_summary_counts_distinct_titles(self) -> None:
        aggregator = RowAggregator().add_all(
            [
                _row("A", "L1", 1.0),
                _row("A", "L1", 2.0),
                _row("B", "L1", 3.0),
                _row("C", "L2", 4.0),
            ]
        )

        summaries = {summary.label: summary for summary in aggregator.label_summaries()}

        assert summaries["L1"].total_earning == 6.0
        assert summaries["L1"].video_count == 2
        assert summaries["L2"].video_count == 1

    def test_custom_hashtag_extractor_is_used(self) -> None:
        aggregator = RowAggregator(hashtag_extractor=lambda text: ["#fixed"])
        aggregator.add(_row("A", description="anything"))

        assert aggregator.video_earnings()[0].hashtags == ("#fixed",)


# ---------------------------------------------------------------------------
# SummaryBuilder
# ---------------------------------------------------------------------------


class TestSummaryBuilder:
    def test_videos_and_labels_sorted_descending(self) -> None:
        result = _build([_row("A", "L1", 1.0), _row("B", "L2", 9.0), _row("C", "L1", 3.0)])

        assert [video.title for video in result.video_earnings] == ["B", "C", "A"]
        assert [summary.label for summary in result.label_summaries] == ["L2", "L1"]

    def test_ties_keep_discovery_order(self) -> None:
        result = _build(
            [
                _row("A", "First", 5.0),
                _row("B", "Second", 5.0),
                _row("C", "Third", 5.0),
            ]
        )

        assert [summary.label for summary in result.label_summaries] == ["First", "Second", "Third"]
        assert [video.title for video in result.video_earnings] == ["A", "B", "C"]

    def test_grand_total_equals_sum_of_video_earnings(self) -> None:
        result = _build([_row("A", "L1", 1.5), _row("B", "L2", 2.25), _row("A", "L1", 0.25)])

        assert result.grand_total == pytest.approx(4.0)
        assert result.grand_total == sum(v.total_earning for v in result.video_earnings)

    def test_grand_total_sums_videos_exactly_when_label_order_differs(self) -> None:
        result = _build(
            [
                _row("A", "L1", 0.1),
                _row("B", "L2", 0.7),
                _row("C", "L1", 0.1),
                _row("C", "L1", 0.2),
            ]
        )

        assert result.grand_total == sum(v.total_earning for v in result.video_earnings)

    def test_low_earning_count_is_strictly_below_one(self) -> None:
        result = _build([_row("A", earning=0.99), _row("B", earning=1.0), _row("C", earning=0.0)])

        assert result.low_earning_count == 2

    def test_date_range_spans_all_parseable_dates(self) -> None:
        result = _build(
            [
                _row("A", date_text="2024-03-15"),
                _row("B", date_text="garbage"),
                _row(None, date_text="2024-01-05"),
                _row("C", date_text="2024-02-01"),
            ]
        )

        assert result.start_date == "5/1/2024"
        assert result.end_date == "15/3/2024"

    def test_date_range_absent_without_parseable_dates(self) -> None:
        result = _build([_row("A", date_text="garbage"), _row("B")])

        assert result.start_date is None
        assert result.end_date is None

    def test_all_hashtags_sorted_unique(self) -> None:
        result = _build(
            [
                _row("A", description="#zeta #alpha"),
                _row("B", "L2", description="#Alpha #mid"),
            ]
        )

        assert result.all_hashtags == ("#alpha", "#mid", "#zeta")

    def test_empty_input_gives_empty_result(self) -> None:
        result = _build([])

        assert result.video_earnings == ()
        assert result.label_summaries == ()
        assert result.grand_total == 0
        assert result.low_earning_count == 0
        assert result.ai_insight is None

    def test_identity_fields_are_carried(self) -> None:
        result = _build([_row("A", earning=2.0)])

        assert result.id == "fixed-id"
        assert result.file_name == "export.csv"
        assert result.created_at == datetime(2024, 2, 1, tzinfo=timezone.utc)

    def test_generated_ids_are_unique(self) -> None:
        builder = SummaryBuilder()

        first = builder.build(RowAggregator(), file_name="a.csv")
        second = builder.build(RowAggregator(), file_name="a.csv")

        assert first.id != second.id
