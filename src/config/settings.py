"""Application settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings

DEFAULT_SYSTEM_PROMPT = (
    "You are NeuralBot, a helpful, friendly, and knowledgeable AI assistant. "
    "You have a futuristic, tech-savvy personality and you're excited to help users "
    "with their questions. You should be concise but informative, and always maintain "
    "a positive, engaging tone. You can help with a wide variety of topics including "
    "technology, science, general knowledge, problem-solving, and creative tasks."
)


class Settings(BaseSettings):
    # Upstream provider credentials (empty = provider disabled)
    openai_api_key: str = ""
    huggingface_api_key: str = ""
    groq_api_key: str = ""
    anthropic_api_key: str = ""

    # Upstream model identifiers
    openai_model: str = "gpt-3.5-turbo"
    huggingface_model: str = "microsoft/DialoGPT-large"
    groq_model: str = "llama-3.1-8b-instant"
    anthropic_model: str = "claude-3-sonnet-20240229"
    upstream_timeout_seconds: float = 30.0

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: str = "*"  # Comma-separated

    # Rate limiting
    rate_limit_max_requests: int = 10  # Requests per window per client IP
    rate_limit_window_seconds: float = 60.0
    rate_limit_backend: str = "memory"  # "memory" | "dynamodb"
    rate_limit_sweep_interval_seconds: float = 0.0  # 0 = never sweep
    dynamodb_table_name: str = "neuralbot-rate-limits"
    aws_region: str = "us-east-1"

    # Conversation
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    history_limit: int = 10
    max_message_length: int = 1000

    # Demo mode latency emulation
    demo_delay_min_seconds: float = 1.0
    demo_delay_max_seconds: float = 3.0

    # Logging
    log_level: str = "INFO"
    audit_log_file: str = ""  # Empty = stdout only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
