"""Text-generation adapters behind the earnings insight.

``build_adapter`` picks one from ``LLMSettings``: the OpenAI chat client for
real narratives, or a fixed Vietnamese paragraph for local runs and tests.
"""

from abc import ABC, abstractmethod
from typing import Optional

from app.config import LLMSettings

SYSTEM_PROMPT = (
    "Bạn là chuyên gia phân tích dữ liệu kiếm tiền từ nội dung video. "
    "Trả lời ngắn gọn bằng tiếng Việt, không dùng bảng."
)

MOCK_INSIGHT = (
    "Nhãn dẫn đầu mang lại phần lớn thu nhập. "
    "Hãy tập trung sản xuất thêm video cho nhãn này và xem lại các video thu nhập thấp."
)


class BaseLLMAdapter(ABC):
    """One prompt in, one block of narrative text out."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return the model's narrative for *prompt*; may raise on transport errors."""


class OpenAILLMAdapter(BaseLLMAdapter):
    """Chat-completions adapter; works with any OpenAI-compatible base URL."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 1024,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.4,
        timeout: float = 60.0,
    ) -> None:
        from openai import OpenAI

        client_kwargs: dict = {"timeout": timeout}
        if api_key:
            client_kwargs["api_key"] = api_key
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    def generate(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


class MockLLMAdapter(BaseLLMAdapter):
    """Returns ``MOCK_INSIGHT`` for every prompt; needs no network or key."""

    def generate(self, prompt: str) -> str:
        return MOCK_INSIGHT


def build_adapter(settings: LLMSettings) -> BaseLLMAdapter:
    """
    LLM_ADAPTER=mock   -> MockLLMAdapter
    LLM_ADAPTER=openai -> OpenAILLMAdapter (default)
    """
    if settings.adapter == "mock":
        return MockLLMAdapter()

    return OpenAILLMAdapter(
        model=settings.model,
        max_tokens=settings.max_tokens,
        api_key=settings.api_key,
        base_url=settings.base_url,
    )
