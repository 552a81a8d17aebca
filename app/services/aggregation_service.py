"""
app/services/aggregation_service.py

Folds normalized rows into per-video and per-label accumulators.

Keying
------
A video is identified by the literal ``(title, label)`` pair. The same
title tagged with two labels is two videos, because the export lists a
video once per label it carries.

Merge rules on a repeated key
-----------------------------
* earnings are summed
* ``asset_id`` is filled only while still unset
* hashtags are unioned in first-seen order
* ``date`` keeps the value of the row that created the key

Date collection is independent of the key: every row with a parseable date
feeds the date range, including rows without a title.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable

from app.domain.earnings import LabelSummary, NormalizedRow, VideoEarning
from app.services.hashtag_extractor import extract_hashtags
from app.validators.cell_parser import parse_date

logger = logging.getLogger(__name__)

VideoKey = tuple[str, str]


@dataclass
class _VideoAccumulator:
    title: str
    label: str
    total_earning: float
    asset_id: str | None
    date: str | None
    hashtags: dict[str, None] = field(default_factory=dict)

    def freeze(self) -> VideoEarning:
        return VideoEarning(
            title=self.title,
            label=self.label,
            total_earning=self.total_earning,
            asset_id=self.asset_id,
            date=self.date,
            hashtags=tuple(self.hashtags),
        )


@dataclass
class _LabelAccumulator:
    label: str
    total_earning: float = 0.0
    titles: dict[str, None] = field(default_factory=dict)

    def freeze(self) -> LabelSummary:
        return LabelSummary(
            label=self.label,
            total_earning=self.total_earning,
            video_count=len(self.titles),
        )


class RowAggregator:
    """
    Single-pass accumulator over the rows of one file.

    Dict insertion order doubles as discovery order, which the summary
    builder relies on for stable tie-breaking.
    """

    def __init__(
        self,
        *,
        hashtag_extractor: Callable[[str | None], list[str]] = extract_hashtags,
    ) -> None:
        self._extract_hashtags = hashtag_extractor
        self._videos: dict[VideoKey, _VideoAccumulator] = {}
        self._labels: dict[str, _LabelAccumulator] = {}
        self._dates: list[datetime] = []
        self._rows_seen = 0
        self._rows_skipped = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add(self, row: NormalizedRow) -> None:
        """
        Fold one row into the accumulators.
        """

        self._rows_seen += 1
        parsed_date = parse_date(row.date_text)
        if parsed_date is not None:
            self._dates.append(parsed_date)

        if row.title is None:
            self._rows_skipped += 1
            return

        hashtags = self._extract_hashtags(row.description)
        key: VideoKey = (row.title, row.label)
        video = self._videos.get(key)
        if video is None:
            video = _VideoAccumulator(
                title=row.title,
                label=row.label,
                total_earning=row.earning,
                asset_id=row.asset_id,
                date=row.date_text,
            )
            self._videos[key] = video
        else:
            video.total_earning += row.earning
            if video.asset_id is None and row.asset_id is not None:
                video.asset_id = row.asset_id
        for tag in hashtags:
            video.hashtags.setdefault(tag, None)

        label = self._labels.get(row.label)
        if label is None:
            label = _LabelAccumulator(label=row.label)
            self._labels[row.label] = label
        label.total_earning += row.earning
        label.titles.setdefault(row.title, None)

    def add_all(self, rows: Iterable[NormalizedRow]) -> "RowAggregator":
        for row in rows:
            self.add(row)
        logger.debug(
            "Aggregated rows=%d skipped_untitled=%d videos=%d labels=%d dates=%d",
            self._rows_seen,
            self._rows_skipped,
            len(self._videos),
            len(self._labels),
            len(self._dates),
        )
        return self

    def video_earnings(self) -> list[VideoEarning]:
        """Videos in discovery order."""
        return [video.freeze() for video in self._videos.values()]

    def label_summaries(self) -> list[LabelSummary]:
        """Labels in discovery order."""
        return [label.freeze() for label in self._labels.values()]

    @property
    def dates(self) -> tuple[datetime, ...]:
        return tuple(self._dates)

    @property
    def rows_seen(self) -> int:
        return self._rows_seen

    @property
    def rows_skipped(self) -> int:
        return self._rows_skipped
