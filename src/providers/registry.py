"""Adapter registry — wire format → adapter instance."""

from src.providers.base import ProviderAdapter
from src.providers.catalog import WireFormat
from src.providers.chat_completions import ChatCompletionsAdapter
from src.providers.messages import MessagesAdapter
from src.providers.text_generation import TextGenerationAdapter

_adapters: dict[WireFormat, ProviderAdapter] = {
    WireFormat.CHAT_COMPLETIONS: ChatCompletionsAdapter(),
    WireFormat.SINGLE_TURN_GENERATION: TextGenerationAdapter(),
    WireFormat.MESSAGES_EXTERNAL_SYSTEM: MessagesAdapter(),
}


def get_adapter(wire_format: WireFormat | str) -> ProviderAdapter:
    """Look up the adapter for a wire format."""
    try:
        return _adapters[WireFormat(wire_format)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown wire format: {wire_format}") from None
