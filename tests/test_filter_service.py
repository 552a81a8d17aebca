"""
tests/test_filter_service.py

Pytest unit tests for the filter recomputation engine.

All tests build the base result in memory; no I/O.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.domain.earnings import AnalysisResult, FilterState, LabelSummary, VideoEarning
from app.services.filter_service import recompute, unfiltered_view


def _video(title: str, label: str, earning: float, *hashtags: str) -> VideoEarning:
    return VideoEarning(title=title, label=label, total_earning=earning, hashtags=hashtags)


@pytest.fixture()
def base() -> AnalysisResult:
    """
    L2: B=10 (#cat), C=0.4 (#dog)        total 10.4
    L3: D=3 (#cat #dog), E=2             total 5
    L1: A=0.5 (#cat)                     total 0.5
    """
    videos = (
        _video("B", "L2", 10.0, "#cat"),
        _video("D", "L3", 3.0, "#cat", "#dog"),
        _video("E", "L3", 2.0),
        _video("A", "L1", 0.5, "#cat"),
        _video("C", "L2", 0.4, "#dog"),
    )
    labels = (
        LabelSummary("L2", 10.4, 2),
        LabelSummary("L3", 5.0, 2),
        LabelSummary("L1", 0.5, 1),
    )
    return AnalysisResult(
        id="base",
        file_name="export.csv",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        video_earnings=videos,
        label_summaries=labels,
        grand_total=15.9,
        low_earning_count=2,
        start_date="1/1/2024",
        end_date="31/1/2024",
        all_hashtags=("#cat", "#dog"),
        missing_columns=("Description / Mô tả",),
    )


def _state(base: AnalysisResult, **overrides) -> FilterState:
    params = {"selected_labels": base.labels}
    params.update(overrides)
    return FilterState.create(**params)


class TestRecompute:
    def test_select_all_reproduces_base_figures(self, base: AnalysisResult) -> None:
        view = recompute(base, FilterState.select_all(base))

        assert view.video_earnings == base.video_earnings
        assert [s.label for s in view.label_summaries] == ["L2", "L3", "L1"]
        assert view.grand_total == pytest.approx(15.9)
        assert view.grand_total == sum(v.total_earning for v in view.video_earnings)
        assert view.low_earning_count == 2

    def test_empty_label_selection_empties_the_view(self, base: AnalysisResult) -> None:
        view = recompute(base, _state(base, selected_labels=[]))

        assert view.video_earnings == ()
        assert view.label_summaries == ()
        assert view.grand_total == 0
        assert view.low_earning_count == 0

    def test_hide_low_earning_labels_uses_pre_filter_totals(self, base: AnalysisResult) -> None:
        view = recompute(base, _state(base, hide_low_earning_labels=True))

        assert [s.label for s in view.label_summaries] == ["L2", "L3"]
        assert all(video.label != "L1" for video in view.video_earnings)

    def test_label_hidden_only_by_post_filter_total_is_kept(self, base: AnalysisResult) -> None:
        # #dog leaves L2 with only C=0.4, but L2's pre-filter total is 10.4.
        view = recompute(
            base,
            _state(base, selected_hashtags=["#dog"], hide_low_earning_labels=True),
        )

        summaries = {s.label: s for s in view.label_summaries}
        assert set(summaries) == {"L2", "L3"}
        assert summaries["L2"].total_earning == pytest.approx(0.4)

    def test_hashtag_filter_is_or_across_selected_tags(self, base: AnalysisResult) -> None:
        view = recompute(base, _state(base, selected_hashtags=["#cat", "#dog"]))

        assert [v.title for v in view.video_earnings] == ["B", "D", "A", "C"]

    def test_hashtag_selection_is_case_insensitive(self, base: AnalysisResult) -> None:
        view = recompute(base, _state(base, selected_hashtags=["#DOG"]))

        assert [v.title for v in view.video_earnings] == ["D", "C"]

    def test_hide_low_earning_videos(self, base: AnalysisResult) -> None:
        view = recompute(base, _state(base, hide_low_earning_videos=True))

        assert [v.title for v in view.video_earnings] == ["B", "D", "E"]
        assert view.low_earning_count == 0
        assert [s.label for s in view.label_summaries] == ["L2", "L3"]

    def test_label_totals_recomputed_from_surviving_videos(self, base: AnalysisResult) -> None:
        view = recompute(base, _state(base, selected_hashtags=["#cat"]))

        summaries = {s.label: s for s in view.label_summaries}
        assert summaries["L2"].total_earning == pytest.approx(10.0)
        assert summaries["L2"].video_count == 1
        assert summaries["L3"].total_earning == pytest.approx(3.0)
        assert view.grand_total == pytest.approx(13.5)

    def test_labels_resorted_after_recompute(self, base: AnalysisResult) -> None:
        view = recompute(base, _state(base, selected_hashtags=["#dog"]))

        assert [s.label for s in view.label_summaries] == ["L3", "L2"]

    def test_recompute_is_idempotent(self, base: AnalysisResult) -> None:
        state = _state(
            base,
            selected_labels=["L1", "L2"],
            selected_hashtags=["#dog"],
            hide_low_earning_labels=True,
        )

        once = recompute(base, state)
        twice = recompute(once, state)

        assert twice == once

    def test_narrowing_selection_never_increases_total(self, base: AnalysisResult) -> None:
        wide = recompute(base, _state(base))
        narrow = recompute(base, _state(base, selected_labels=["L2", "L3"]))
        narrower = recompute(base, _state(base, selected_labels=["L3"], hide_low_earning_videos=True))

        assert wide.grand_total >= narrow.grand_total >= narrower.grand_total

    def test_base_is_not_mutated_and_metadata_is_carried(self, base: AnalysisResult) -> None:
        view = recompute(base, _state(base, selected_labels=["L3"]))

        assert base.grand_total == pytest.approx(15.9)
        assert len(base.video_earnings) == 5
        assert view.id == base.id
        assert view.start_date == base.start_date
        assert view.all_hashtags == base.all_hashtags
        assert view.missing_columns == base.missing_columns
        assert view.base_label_summaries == base.label_summaries


class TestUnfilteredView:
    def test_wraps_base_without_changes(self, base: AnalysisResult) -> None:
        view = unfiltered_view(base)

        assert view.video_earnings == base.video_earnings
        assert view.label_summaries == base.label_summaries
        assert view.base_label_summaries == base.label_summaries

    def test_filtered_result_returned_as_is(self, base: AnalysisResult) -> None:
        view = recompute(base, _state(base, selected_labels=["L3"]))

        assert unfiltered_view(view) is view
