"""
app/services/efficiency_service.py

Per-label efficiency tiers and bonus amounts for a filtered view.

Formulas
--------
Efficiency        = total_earning / video_count      (0 when video_count is 0)
Bonus amount      = total_earning * bonus_percentage / 100
Converted amount  = bonus_amount * exchange_rate

Tiers are judged against the mean efficiency of the labels currently
visible, in this order:

    efficiency > 1.5 * mean  -> top
    efficiency > mean        -> middle
    otherwise                -> baseline

Independently of the tier, the first label in sort order whose efficiency
equals the maximum is flagged ``is_highest``. Bonus percentage and exchange
rate are taken as given; zero and negative values simply propagate.
"""

from __future__ import annotations

import logging
from typing import Final

from app.domain.earnings import AnalysisResult, BonusReport, LabelEfficiency, LabelSummary

logger = logging.getLogger(__name__)

TIER_TOP: Final[str] = "top"
TIER_MIDDLE: Final[str] = "middle"
TIER_BASELINE: Final[str] = "baseline"

TOP_TIER_FACTOR: Final[float] = 1.5


def label_efficiency(summary: LabelSummary) -> float:
    if summary.video_count == 0:
        return 0.0
    return summary.total_earning / summary.video_count


def classify_tier(efficiency: float, mean_efficiency: float) -> str:
    if efficiency > TOP_TIER_FACTOR * mean_efficiency:
        return TIER_TOP
    if efficiency > mean_efficiency:
        return TIER_MIDDLE
    return TIER_BASELINE


def bonus_amount(total_earning: float, bonus_percentage: float) -> float:
    return total_earning * bonus_percentage / 100


def converted_amount(bonus: float, exchange_rate: float) -> float:
    return bonus * exchange_rate


class EfficiencyClassifier:
    """
    Stateless classifier consumed by the table renderer and the export.

    Usage::

        report = EfficiencyClassifier().classify(view, bonus_percentage=10, exchange_rate=25000)
        report.rows[0].tier  # "top"
    """

    def classify(
        self,
        result: AnalysisResult,
        *,
        bonus_percentage: float,
        exchange_rate: float,
    ) -> BonusReport:
        summaries = result.label_summaries
        efficiencies = [label_efficiency(summary) for summary in summaries]
        mean_efficiency = sum(efficiencies) / len(efficiencies) if efficiencies else 0.0
        max_efficiency = max(efficiencies) if efficiencies else None

        rows: list[LabelEfficiency] = []
        highest_label: str | None = None
        for summary, efficiency in zip(summaries, efficiencies):
            is_highest = highest_label is None and efficiency == max_efficiency
            if is_highest:
                highest_label = summary.label
            bonus = bonus_amount(summary.total_earning, bonus_percentage)
            rows.append(
                LabelEfficiency(
                    label=summary.label,
                    total_earning=summary.total_earning,
                    video_count=summary.video_count,
                    efficiency=efficiency,
                    tier=classify_tier(efficiency, mean_efficiency),
                    is_highest=is_highest,
                    bonus_amount=bonus,
                    converted_amount=converted_amount(bonus, exchange_rate),
                )
            )

        report = BonusReport(
            rows=tuple(rows),
            mean_efficiency=mean_efficiency,
            bonus_percentage=bonus_percentage,
            exchange_rate=exchange_rate,
            total_bonus=sum(row.bonus_amount for row in rows),
            total_converted=sum(row.converted_amount for row in rows),
            highest_label=highest_label,
        )
        logger.debug(
            "Classified %d labels mean_efficiency=%.4f highest=%r total_bonus=%.4f",
            len(rows),
            mean_efficiency,
            highest_label,
            report.total_bonus,
        )
        return report
