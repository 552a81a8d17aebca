"""Prompt builder for the earnings narrative insight."""

from typing import Sequence

from app.domain.earnings import LabelSummary

_INSTRUCTIONS = """\
Hãy phân tích ngắn gọn kết quả này, chỉ ra nhãn nào hiệu quả nhất và đưa ra \
2-3 lời khuyên để tối ưu hóa thu nhập dựa trên số lượng video và hiệu suất của \
từng nhãn. Viết bằng tiếng Việt, giọng điệu chuyên nghiệp, súc tích.
"""


class InsightPromptBuilder:
    """Builds a deterministic Vietnamese prompt from report figures."""

    def build_prompt(
        self,
        *,
        grand_total: float,
        bonus_percentage: float,
        video_count: int,
        low_earning_count: int,
        label_summaries: Sequence[LabelSummary],
    ) -> str:
        """Build the insight prompt.

        Args:
            grand_total: Total earnings of the report.
            bonus_percentage: Bonus percentage applied to label earnings.
            video_count: Number of aggregated videos.
            low_earning_count: Videos earning less than one unit.
            label_summaries: Per-label totals, best first.

        Returns:
            A prompt string ready for LLM consumption.
        """
        lines = "\n".join(self._format_label(summary) for summary in label_summaries)
        return (
            "Dưới đây là dữ liệu thu nhập từ nội dung video:\n"
            f"- Tổng thu nhập toàn bộ: {grand_total:.2f} USD\n"
            f"- Tỷ lệ thưởng: {bonus_percentage:g}%\n"
            f"- Tổng số video: {video_count}\n"
            f"- Số video thu nhập thấp (dưới 1 USD): {low_earning_count}\n"
            "- Tóm tắt theo nhãn tùy chỉnh:\n"
            f"{lines}\n\n"
            f"{_INSTRUCTIONS}"
        )

    @staticmethod
    def _format_label(summary: LabelSummary) -> str:
        return (
            f'+ Nhãn "{summary.label}": {summary.total_earning:.2f} USD '
            f"({summary.video_count} video)"
        )
