"""
app/services/insight_service.py

Narrative insight generation for analysis results.

The insight call is the only slow, fallible step around the report and it
never affects the base result: any adapter or transport failure degrades to
a fixed apology string. ``attach_insight`` is meant to run after the result
has been returned to the user (a FastAPI background task or a worker
thread); it writes back by identity and does nothing if the entry has left
the history in the meantime.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, Sequence

from app.config import get_llm_settings
from app.domain.earnings import AnalysisResult, LabelSummary
from app.repositories.history_repository import HistoryRepository, HistoryStorageError
from llm_synthesis.adapter import BaseLLMAdapter, build_adapter
from llm_synthesis.prompt_builder import InsightPromptBuilder

logger = logging.getLogger(__name__)

INSIGHT_FAILURE_MESSAGE = "Đã xảy ra lỗi khi kết nối với trí tuệ nhân tạo để phân tích dữ liệu."
INSIGHT_EMPTY_MESSAGE = "Không thể tạo phân tích lúc này."


class InsightService:
    """
    Builds the prompt, calls the adapter, and shields callers from failures.
    """

    def __init__(
        self,
        *,
        adapter_factory: Callable[[], BaseLLMAdapter] | None = None,
        prompt_builder: InsightPromptBuilder | None = None,
    ) -> None:
        self._adapter_factory = adapter_factory or (lambda: build_adapter(get_llm_settings()))
        self._prompt_builder = prompt_builder or InsightPromptBuilder()

    def generate_insight(
        self,
        *,
        grand_total: float,
        bonus_percentage: float,
        video_count: int,
        low_earning_count: int,
        label_summaries: Sequence[LabelSummary],
    ) -> str:
        """
        Return the narrative text, or a placeholder when generation fails.
        """

        prompt = self._prompt_builder.build_prompt(
            grand_total=grand_total,
            bonus_percentage=bonus_percentage,
            video_count=video_count,
            low_earning_count=low_earning_count,
            label_summaries=label_summaries,
        )
        try:
            text = self._adapter_factory().generate(prompt)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Insight generation failed: %s", exc)
            return INSIGHT_FAILURE_MESSAGE

        text = (text or "").strip()
        return text or INSIGHT_EMPTY_MESSAGE

    def insight_for(self, result: AnalysisResult, *, bonus_percentage: float) -> str:
        return self.generate_insight(
            grand_total=result.grand_total,
            bonus_percentage=bonus_percentage,
            video_count=len(result.video_earnings),
            low_earning_count=result.low_earning_count,
            label_summaries=result.label_summaries,
        )

    def attach_insight(
        self,
        *,
        repository: HistoryRepository,
        result_id: str,
        bonus_percentage: float,
    ) -> AnalysisResult | None:
        """
        Generate the insight for history entry *result_id* and store it there.

        Returns the updated entry, or None when the entry is no longer in
        history (before or after generation).
        """

        result = repository.get(result_id)
        if result is None:
            logger.info("Insight skipped for id=%s; entry no longer in history", result_id)
            return None

        insight = self.insight_for(result, bonus_percentage=bonus_percentage)
        try:
            updated = repository.attach_insight(result_id, insight)
        except HistoryStorageError as exc:
            logger.warning("Insight for id=%s not persisted: %s", result_id, exc)
            return None
        if updated is not None:
            logger.info("Insight attached id=%s chars=%d", result_id, len(insight))
        return updated


@lru_cache(maxsize=1)
def get_insight_service() -> InsightService:
    """
    Build and cache the insight service with env-driven adapter settings.
    """
    return InsightService()
