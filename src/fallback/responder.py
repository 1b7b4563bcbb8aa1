"""Offline keyword-driven responder used in demo mode and on upstream failure.

Rules are checked in declaration order and the first rule with a matching
keyword answers. Keywords match as plain case-insensitive substrings, so
"weatherman" counts as weather and "Helloooo" as a greeting. Short
keywords over-match: "hi" fires on "this" and "ai" on "said".
A message that matches no rule gets a random generic reply that echoes it.
"""

import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime


def _time_reply(now: datetime) -> str:
    # %X / %x follow the process locale
    return (
        f"The current time is {now.strftime('%X')} and the date is {now.strftime('%x')}. "
        "I can help you with time-related questions, scheduling, or time zone conversions!"
    )


@dataclass
class KeywordRule:
    category: str
    keywords: tuple[str, ...]
    reply: str | Callable[[datetime], str]

    def matches(self, lowered: str) -> bool:
        return any(k.lower() in lowered for k in self.keywords)

    def render(self, now: datetime) -> str:
        return self.reply(now) if callable(self.reply) else self.reply


DEFAULT_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        "greeting", ("hello", "hi", "hey"),
        "Hello! I'm NeuralBot, your AI assistant. I'm here to help you with questions, "
        "provide information, and have engaging conversations. What would you like to know?",
    ),
    KeywordRule(
        "wellbeing", ("how are you", "how do you feel"),
        "I'm doing great! I'm running smoothly in demo mode and ready to assist you. "
        "I'm excited to help with whatever questions or topics you have in mind. "
        "How can I assist you today?",
    ),
    KeywordRule(
        "identity", ("what are you", "who are you"),
        "I'm NeuralBot, a futuristic AI assistant designed to help with a wide variety of "
        "topics. I can assist with questions about technology, science, general knowledge, "
        "problem-solving, and creative tasks. I'm currently running in demo mode, but I'm "
        "still quite capable!",
    ),
    KeywordRule(
        "weather", ("weather", "temperature"),
        "I'd love to help with weather information! In demo mode, I can't access real-time "
        "weather data, but I can tell you that weather forecasting typically involves "
        "analyzing atmospheric pressure, temperature, humidity, and wind patterns. For "
        "current weather, I'd recommend checking a weather app or website.",
    ),
    KeywordRule("time", ("time", "date"), _time_reply),
    KeywordRule(
        "math", ("calculate", "math", "+", "-", "*", "/"),
        "I can help with mathematical calculations! I'm good at arithmetic, algebra, "
        "geometry, and other mathematical concepts. What specific calculation or math "
        "problem would you like me to help you with?",
    ),
    KeywordRule(
        "programming", ("code", "programming", "javascript", "python", "html", "css"),
        "I'd be happy to help with programming questions! I can assist with various "
        "programming languages, debugging, best practices, and software development "
        "concepts. What programming topic or problem are you working on?",
    ),
    KeywordRule(
        "science", ("science", "physics", "chemistry", "biology"),
        "Science is fascinating! I can help explain scientific concepts, theories, and "
        "phenomena across various fields like physics, chemistry, biology, and more. "
        "What scientific topic would you like to explore?",
    ),
    KeywordRule(
        "technology", ("technology", "ai", "artificial intelligence", "machine learning"),
        "Technology is my specialty! I can discuss AI, machine learning, software "
        "development, emerging technologies, and how they impact our world. What aspect "
        "of technology interests you most?",
    ),
    KeywordRule(
        "help", ("help", "assist"),
        "I'm here to help! I can assist with a wide range of topics including general "
        "knowledge, problem-solving, creative tasks, technology questions, and more. "
        "What specific area would you like help with?",
    ),
    KeywordRule(
        "thanks", ("thank", "thanks"),
        "You're very welcome! I'm glad I could help. Feel free to ask me anything else - "
        "I'm here to assist you with whatever questions or topics you have in mind.",
    ),
    KeywordRule(
        "farewell", ("bye", "goodbye", "see you"),
        "Goodbye! It was great chatting with you. Feel free to come back anytime if you "
        "have more questions. I'm always here to help!",
    ),
)

GENERIC_TEMPLATES: tuple[str, ...] = (
    "That's an interesting question about \"{message}\". I'd be happy to help you explore "
    "this topic further. Could you provide a bit more detail about what specific aspect "
    "you'd like to know about?",
    "I understand you're asking about \"{message}\". This is a great topic to discuss! In "
    "demo mode, I can provide general information and guidance. What would you like to "
    "know specifically?",
    "\"{message}\" - that's a thoughtful question! I can help break this down and provide "
    "insights. What particular angle or aspect of this topic interests you most?",
    "I appreciate you asking about \"{message}\". This is definitely something I can help "
    "you with! Could you tell me more about what you're trying to understand or accomplish?",
    "Great question about \"{message}\"! I'm here to help you explore this topic. What "
    "specific information or guidance are you looking for?",
)


class FallbackResponder:
    """Produces a canned reply for any message. Never raises."""

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = datetime.now,
        rules: tuple[KeywordRule, ...] = DEFAULT_RULES,
        templates: tuple[str, ...] = GENERIC_TEMPLATES,
    ):
        self._rng = rng or random.Random()
        self._clock = clock
        self.rules = rules
        self.templates = templates

    def match(self, message: str) -> KeywordRule | None:
        """First rule whose keywords appear in the message, if any."""
        lowered = message.lower()
        for rule in self.rules:
            if rule.matches(lowered):
                return rule
        return None

    def respond(self, message: str) -> str:
        rule = self.match(message)
        if rule is not None:
            return rule.render(self._clock())
        # str.replace rather than format(): the message may contain braces
        return self._rng.choice(self.templates).replace("{message}", message)


_responder: FallbackResponder | None = None


def get_fallback_responder() -> FallbackResponder:
    global _responder
    if _responder is None:
        _responder = FallbackResponder()
    return _responder
