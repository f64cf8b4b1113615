"""Chat-completions client for the assistant (any OpenAI-compatible endpoint)."""
import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from app.config import settings

logger = logging.getLogger(__name__)


class AssistantError(Exception):
    pass


class AssistantConfigurationError(AssistantError):
    pass


class ChatModelClient:
    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.ai_model

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not settings.ai_api_key:
                raise AssistantConfigurationError("AI assistant is not configured")
            self._client = OpenAI(api_key=settings.ai_api_key, base_url=settings.ai_base_url)
        return self._client

    def complete(
        self,
        messages: List[Dict[str, Any]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """Send the messages and return the reply text"""
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=settings.ai_temperature if temperature is None else temperature,
                max_tokens=max_tokens or settings.ai_max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"Chat completion failed: {e}")
            raise AssistantError("Failed to get a response from the AI model") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise AssistantError("The AI model returned an empty response")
        return content.strip()


def get_chat_model_client() -> ChatModelClient:
    return ChatModelClient()
