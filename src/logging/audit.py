"""Structured JSON logging of chat outcomes.

Each /api/chat request ends in exactly one outcome record, written as a JSON
line to stdout (and to AUDIT_LOG_FILE when set):

    rejected               input failed validation (400)
    rate_limited           the client's window is full (429)
    demo                   no usable provider; offline reply (200)
    answered               a provider replied (200)
    upstream_rate_limited  the provider answered 429 (429)
    fallback               the provider call failed; offline reply with 5xx status

The request id and client IP are bound once per request with
``bind_request`` and stamped on every record logged while it runs, so the
outcome record and any error logged below it correlate. Message text and
credentials are never logged.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from src.config.settings import get_settings

AUDIT_LOGGER_NAME = "gateway.audit"

OUTCOME_REJECTED = "rejected"
OUTCOME_RATE_LIMITED = "rate_limited"
OUTCOME_DEMO = "demo"
OUTCOME_ANSWERED = "answered"
OUTCOME_UPSTREAM_RATE_LIMITED = "upstream_rate_limited"
OUTCOME_FALLBACK = "fallback"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
client_ip_var: ContextVar[str] = ContextVar("client_ip", default="")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, carrying the bound request context."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(""),
        }
        client_ip = client_ip_var.get("")
        if client_ip:
            log_entry["client_ip"] = client_ip
        if hasattr(record, "audit_data"):
            log_entry.update(record.audit_data)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging() -> None:
    """Configure the audit logger with JSON output."""
    settings = get_settings()

    logger = logging.getLogger(AUDIT_LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.handlers.clear()

    formatter = JSONFormatter()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    if settings.audit_log_file:
        file_handler = logging.FileHandler(settings.audit_log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    # httpx logs full request URLs at INFO; keep them out of the audit stream
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER_NAME)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


def bind_request(client_ip: str) -> str:
    """Start the logging context for one chat request. Returns its request id."""
    request_id = generate_request_id()
    request_id_var.set(request_id)
    client_ip_var.set(client_ip)
    return request_id


def log_outcome(outcome: str, message: str, level: int = logging.INFO, **fields) -> None:
    """Write the single outcome record for the current request."""
    get_audit_logger().log(level, message, extra={"audit_data": {"outcome": outcome, **fields}})


class UpstreamTimer:
    """Times one provider round trip. ``elapsed_ms`` is set even when the call raises."""

    def __init__(self):
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
