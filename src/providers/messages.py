"""Messages API wire format (Anthropic).

This protocol carries the system prompt outside the message list. The
adapter drops the leading system message and does not forward it, so the
upstream model answers without the gateway's persona prompt.
"""

from src.chat.models import ConversationMessage
from src.providers.base import ProviderAdapter, malformed
from src.providers.catalog import ProviderConfig

MAX_TOKENS = 500
API_VERSION = "2023-06-01"


class MessagesAdapter(ProviderAdapter):
    """Authenticates with x-api-key rather than a bearer token."""

    def build_request(
        self, messages: list[ConversationMessage], config: ProviderConfig
    ) -> tuple[dict, dict]:
        headers = {
            "Content-Type": "application/json",
            "x-api-key": config.credential,
            "anthropic-version": API_VERSION,
        }
        body = {
            "model": config.model_id,
            "max_tokens": MAX_TOKENS,
            "messages": [m.to_dict() for m in messages[1:]],
        }
        return headers, body

    def parse_response(self, raw) -> str:
        if not isinstance(raw, dict):
            raise malformed("JSON object")
        content = raw.get("content")
        if not isinstance(content, list) or not content or not isinstance(content[0], dict):
            raise malformed("content")
        text = content[0].get("text")
        if not isinstance(text, str):
            raise malformed("content[0].text")
        return text
