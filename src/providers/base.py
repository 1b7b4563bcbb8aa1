"""Abstract base for provider wire-format adapters."""

from abc import ABC, abstractmethod

from src.chat.models import ConversationMessage
from src.providers.catalog import ProviderConfig
from src.proxy.errors import MalformedResponse


class ProviderAdapter(ABC):
    """Translates a normalized message list to and from one wire format.

    Adapters are pure: no I/O and no shared state. The dispatcher owns the
    HTTP call.
    """

    @abstractmethod
    def build_request(
        self, messages: list[ConversationMessage], config: ProviderConfig
    ) -> tuple[dict, dict]:
        """Build the upstream request.

        Args:
            messages: System prompt, history and the new user turn, in order.
            config: The selected provider's catalog entry.

        Returns:
            (headers, body) for a JSON POST to ``config.endpoint_url``.
        """
        ...

    @abstractmethod
    def parse_response(self, raw) -> str:
        """Extract the reply text from a decoded JSON response body.

        Raises:
            MalformedResponse: the expected field is missing and no default applies.
        """
        ...


def malformed(what: str) -> MalformedResponse:
    return MalformedResponse(f"Upstream response missing {what}")
