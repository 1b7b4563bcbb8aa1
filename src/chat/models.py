"""Conversation and outcome models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

ROLES = ("system", "user", "assistant")


def utc_timestamp() -> str:
    """ISO 8601 UTC timestamp with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ConversationMessage:
    role: str  # "system" | "user" | "assistant"
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass
class DispatchResult:
    text: str
    provider_name: str
    is_fallback: bool = False


@dataclass
class ChatOutcome:
    response: str
    is_demo: bool
    provider: str
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict:
        return {
            "response": self.response,
            "isDemo": self.is_demo,
            "timestamp": self.timestamp,
            "provider": self.provider,
        }
