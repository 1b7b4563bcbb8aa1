"""Chat request validation and message list assembly."""

from src.chat.models import ROLES, ConversationMessage
from src.proxy.errors import InvalidInput


def parse_chat_request(body, max_length: int = 1000) -> tuple[str, list]:
    """Validate a POST /api/chat body.

    Returns the trimmed user message and the raw conversation history list.

    Raises:
        InvalidInput: body is not an object, message is missing, empty,
            whitespace-only or longer than ``max_length`` after trimming, or
            conversationHistory is not a list.
    """
    if not isinstance(body, dict):
        raise InvalidInput("Request body must be a JSON object")

    message = body.get("message")
    if not isinstance(message, str) or not message.strip():
        raise InvalidInput("Message is required and must be a non-empty string")

    message = message.strip()
    if len(message) > max_length:
        raise InvalidInput(f"Message too long. Maximum {max_length} characters allowed.")

    history = body.get("conversationHistory")
    if history is None:
        history = []
    elif not isinstance(history, list):
        raise InvalidInput("conversationHistory must be a list")

    return message, history


def build_messages(
    message: str,
    history: list,
    system_prompt: str,
    history_limit: int = 10,
) -> list[ConversationMessage]:
    """System prompt + last ``history_limit`` history entries + the new user turn.

    Entries without a known role or string content are skipped.
    """
    messages = [ConversationMessage(role="system", content=system_prompt)]

    recent = history[-history_limit:] if history_limit > 0 else []
    for entry in recent:
        if not isinstance(entry, dict):
            continue
        role = entry.get("role")
        content = entry.get("content")
        if role in ROLES and isinstance(content, str):
            messages.append(ConversationMessage(role=role, content=content))

    messages.append(ConversationMessage(role="user", content=message))
    return messages
