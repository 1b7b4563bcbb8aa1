"""Chat-completions wire format (OpenAI and OpenAI-compatible APIs such as Groq)."""

from src.chat.models import ConversationMessage
from src.providers.base import ProviderAdapter, malformed
from src.providers.catalog import ProviderConfig

MAX_TOKENS = 500
TEMPERATURE = 0.7


class ChatCompletionsAdapter(ProviderAdapter):
    """Sends the full message list, system prompt included, with bearer auth."""

    def build_request(
        self, messages: list[ConversationMessage], config: ProviderConfig
    ) -> tuple[dict, dict]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.credential}",
        }
        body = {
            "model": config.model_id,
            "messages": [m.to_dict() for m in messages],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }
        return headers, body

    def parse_response(self, raw) -> str:
        if not isinstance(raw, dict):
            raise malformed("JSON object")
        choices = raw.get("choices")
        if not isinstance(choices, list) or not choices:
            raise malformed("choices")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise malformed("choices[0].message")
        content = message.get("content")
        if not isinstance(content, str):
            raise malformed("choices[0].message.content")
        return content
