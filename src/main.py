"""NeuralBot Chat Gateway — FastAPI application entry point.

Receives a chat message plus recent history, forwards it to the first
configured AI provider and falls back to an offline keyword responder
when no provider is configured or the upstream call fails.
"""

import asyncio
import contextlib
import logging
import random
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.chat.conversation import build_messages, parse_chat_request
from src.chat.models import ChatOutcome, utc_timestamp
from src.config.settings import get_settings
from src.fallback.responder import get_fallback_responder
from src.logging.audit import (
    OUTCOME_ANSWERED,
    OUTCOME_DEMO,
    OUTCOME_FALLBACK,
    OUTCOME_RATE_LIMITED,
    OUTCOME_REJECTED,
    OUTCOME_UPSTREAM_RATE_LIMITED,
    UpstreamTimer,
    bind_request,
    get_audit_logger,
    log_outcome,
    setup_logging,
)
from src.proxy.dispatcher import close_dispatcher, get_dispatcher
from src.proxy.errors import (
    DispatchError,
    InvalidInput,
    NoProviderAvailable,
    RateLimitExceeded,
    UpstreamRateLimited,
)
from src.security.ratelimit import get_rate_limiter

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging()
    logger = get_audit_logger()
    settings = get_settings()

    catalog = get_dispatcher().catalog
    current = catalog.select()
    logger.info(
        "Gateway started",
        extra={"audit_data": {
            "version": VERSION,
            "configured_providers": [p.name for p in catalog.providers],
            "usable_providers": [p.name for p in catalog.usable_providers()],
            "provider": current.name if current else "demo",
            "demo_mode": current is None,
            "rate_limit": settings.rate_limit_max_requests,
            "rate_limit_window_seconds": settings.rate_limit_window_seconds,
        }},
    )

    sweeper = None
    if settings.rate_limit_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(_sweep_rate_limits(settings.rate_limit_sweep_interval_seconds))

    yield

    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
    await close_dispatcher()
    logger.info("Gateway stopped")


async def _sweep_rate_limits(interval: float) -> None:
    limiter = get_rate_limiter()
    while True:
        await asyncio.sleep(interval)
        removed = await limiter.sweep()
        if removed:
            get_audit_logger().debug(
                "Expired rate windows removed", extra={"audit_data": {"removed": removed}},
            )


app = FastAPI(
    title="NeuralBot Chat Gateway",
    description="Chat gateway with multi-provider dispatch and offline fallback",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and wrong methods on known paths both read as "no such endpoint"
    if exc.status_code in (404, 405):
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    get_audit_logger().error(
        "Unhandled error",
        exc_info=exc,
        extra={"audit_data": {"path": request.url.path}},
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error", "isDemo": True})


@app.get("/api/health")
async def health():
    usable = get_dispatcher().catalog.usable_providers()
    return {
        "status": "healthy",
        "timestamp": utc_timestamp(),
        "version": VERSION,
        "features": {
            "aiProviders": [p.name for p in usable],
            "rateLimit": True,
            "cors": True,
        },
        "currentProvider": usable[0].name if usable else "demo",
    }


@app.post("/api/chat")
async def chat(request: Request):
    """Answer one chat message.

    Pipeline: Validate -> Rate Limit -> Dispatch -> (Fallback on failure) -> Log
    """
    settings = get_settings()
    client_ip = request.client.host if request.client else "unknown"
    rid = bind_request(client_ip)

    # 1. Input validation (before any rate-limit bookkeeping)
    try:
        body = await request.json()
    except ValueError:
        body = None
    try:
        message, history = parse_chat_request(body, settings.max_message_length)
    except InvalidInput as e:
        log_outcome(OUTCOME_REJECTED, "Invalid chat request", reason=e.detail)
        return JSONResponse(status_code=e.status_code, content={"error": e.public_message},
                            headers={"X-Request-Id": rid})

    # 2. Rate limiting (per client IP)
    rate_result = await get_rate_limiter().check(client_ip)
    if not rate_result.allowed:
        denied = RateLimitExceeded(retry_after=rate_result.retry_after)
        log_outcome(
            OUTCOME_RATE_LIMITED, "Rate limit exceeded", logging.WARNING,
            rate_limit=rate_result.limit, retry_after=rate_result.retry_after,
        )
        return JSONResponse(
            status_code=denied.status_code,
            content={"error": denied.public_message, "retryAfter": denied.retry_after},
            headers={
                "Retry-After": str(denied.retry_after),
                "X-RateLimit-Limit": str(rate_result.limit),
                "X-RateLimit-Remaining": "0",
                "X-Request-Id": rid,
            },
        )

    headers = {
        "X-RateLimit-Limit": str(rate_result.limit),
        "X-RateLimit-Remaining": str(rate_result.remaining),
        "X-Request-Id": rid,
    }

    # 3. Dispatch to the selected provider
    messages = build_messages(message, history, settings.system_prompt, settings.history_limit)
    responder = get_fallback_responder()

    try:
        with UpstreamTimer() as timer:
            result = await get_dispatcher().send(messages)

    except NoProviderAvailable:
        await asyncio.sleep(_demo_delay())
        outcome = ChatOutcome(response=responder.respond(message), is_demo=True, provider="demo")
        log_outcome(OUTCOME_DEMO, "Demo response", provider="demo")
        return JSONResponse(content=outcome.to_dict(), headers=headers)

    except UpstreamRateLimited as e:
        log_outcome(
            OUTCOME_UPSTREAM_RATE_LIMITED, "Upstream rate limited", logging.WARNING,
            provider=e.provider, retry_after=e.retry_after, latency_ms=timer.elapsed_ms,
        )
        return JSONResponse(
            status_code=e.status_code,
            content={"error": e.public_message, "retryAfter": e.retry_after},
            headers={**headers, "Retry-After": str(e.retry_after)},
        )

    except DispatchError as e:
        log_outcome(
            OUTCOME_FALLBACK, "Upstream call failed", logging.ERROR,
            provider=e.provider,
            error_type=type(e).__name__,
            detail=e.detail,
            status=e.status_code,
            latency_ms=timer.elapsed_ms,
        )
        outcome = ChatOutcome(response=responder.respond(message), is_demo=True, provider="demo")
        return JSONResponse(
            status_code=e.status_code,
            content={"error": e.public_message, **outcome.to_dict()},
            headers=headers,
        )

    # 4. Audit log
    log_outcome(
        OUTCOME_ANSWERED, "Request answered",
        provider=result.provider_name,
        latency_ms=timer.elapsed_ms,
        history_messages=len(messages) - 2,
        rate_limit_remaining=rate_result.remaining,
    )
    outcome = ChatOutcome(response=result.text, is_demo=False, provider=result.provider_name)
    return JSONResponse(content=outcome.to_dict(), headers=headers)


def _demo_delay() -> float:
    """Artificial latency for demo replies, so they pace like real providers."""
    settings = get_settings()
    low = max(0.0, settings.demo_delay_min_seconds)
    high = max(low, settings.demo_delay_max_seconds)
    return random.uniform(low, high)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
