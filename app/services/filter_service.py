"""
app/services/filter_service.py

Filter recomputation engine.

``recompute`` derives a consistent filtered view from a base result and the
current ``FilterState``. Each step works on the output of the previous one:

    1. keep labels that are selected
    2. optionally drop labels whose pre-filter total is low-earning
    3. keep videos whose label survived
    4. keep videos carrying at least one selected hashtag (if any selected)
    5. optionally drop low-earning videos
    6. recompute label totals and counts from the surviving videos and drop
       labels left without videos
    7. re-sort labels by total earning, descending
    8. grand total and low-earning count come from the final video set

Label totals in a filtered view therefore always match the videos shown in
that same view.
"""

from __future__ import annotations

import logging

from app.domain.earnings import (
    AnalysisResult,
    FilteredResult,
    FilterState,
    LabelSummary,
    VideoEarning,
    is_low_earning,
)
from app.services.summary_builder import sort_by_earning_desc

logger = logging.getLogger(__name__)


def _pre_filter_totals(base: AnalysisResult) -> tuple[tuple[LabelSummary, ...], dict[str, float]]:
    source = base.base_label_summaries if isinstance(base, FilteredResult) else base.label_summaries
    return source, {summary.label: summary.total_earning for summary in source}


def recompute(base: AnalysisResult, state: FilterState) -> FilteredResult:
    """
    Derive the filtered view of *base* under *state*.

    Pure: the same inputs always give an equal result, and feeding a
    filtered result back in with the same state returns it unchanged.
    """

    source_summaries, original_totals = _pre_filter_totals(base)

    labels = [summary for summary in base.label_summaries if summary.label in state.selected_labels]

    if state.hide_low_earning_labels:
        labels = [
            summary
            for summary in labels
            if not is_low_earning(original_totals.get(summary.label, summary.total_earning))
        ]

    surviving_labels = {summary.label for summary in labels}
    videos: list[VideoEarning] = [
        video for video in base.video_earnings if video.label in surviving_labels
    ]

    if state.selected_hashtags:
        videos = [
            video
            for video in videos
            if any(tag in state.selected_hashtags for tag in video.hashtags)
        ]

    if state.hide_low_earning_videos:
        videos = [video for video in videos if not is_low_earning(video.total_earning)]

    totals: dict[str, float] = {summary.label: 0.0 for summary in labels}
    titles: dict[str, set[str]] = {summary.label: set() for summary in labels}
    for video in videos:
        totals[video.label] += video.total_earning
        titles[video.label].add(video.title)

    recomputed = [
        LabelSummary(label=label, total_earning=totals[label], video_count=len(titles[label]))
        for label in totals
        if titles[label]
    ]
    label_summaries: tuple[LabelSummary, ...] = sort_by_earning_desc(recomputed)

    grand_total = sum(video.total_earning for video in videos)
    low_earning_count = sum(1 for video in videos if is_low_earning(video.total_earning))

    logger.debug(
        "Recomputed view id=%s labels=%d/%d videos=%d/%d grand_total=%.4f",
        base.id,
        len(label_summaries),
        len(base.label_summaries),
        len(videos),
        len(base.video_earnings),
        grand_total,
    )

    fields = {name: getattr(base, name) for name in AnalysisResult.__dataclass_fields__}
    fields.update(
        video_earnings=tuple(videos),
        label_summaries=label_summaries,
        grand_total=grand_total,
        low_earning_count=low_earning_count,
    )
    return FilteredResult(**fields, base_label_summaries=source_summaries)


def unfiltered_view(base: AnalysisResult) -> FilteredResult:
    """
    Wrap *base* as a filtered result without dropping anything.
    """

    if isinstance(base, FilteredResult):
        return base
    fields = {name: getattr(base, name) for name in AnalysisResult.__dataclass_fields__}
    return FilteredResult(**fields, base_label_summaries=base.label_summaries)
