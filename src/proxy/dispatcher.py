"""Dispatcher — sends a message list to the selected provider.

Selects the first usable provider from the catalog, builds the request
with that provider's adapter, performs one bounded HTTP call and maps every
failure onto the gateway error taxonomy. No retries: a failed call is
raised immediately and the caller decides what to do.
"""

import asyncio
import json

import httpx

from src.chat.models import ConversationMessage, DispatchResult
from src.config.settings import get_settings
from src.logging.audit import get_audit_logger
from src.providers.catalog import ProviderCatalog, ProviderConfig, build_catalog
from src.providers.registry import get_adapter
from src.proxy.errors import (
    MalformedResponse,
    NetworkError,
    NoProviderAvailable,
    UpstreamAuthError,
    UpstreamRateLimited,
    UpstreamRequestError,
    UpstreamServerError,
    UpstreamTimeout,
)

DEFAULT_TIMEOUT_SECONDS = 30.0
MAX_RETRY_AFTER_SECONDS = 3600


class Dispatcher:
    """Routes a chat request to one upstream provider."""

    def __init__(self, catalog: ProviderCatalog, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.catalog = catalog
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0))
        return self._client

    async def send(self, messages: list[ConversationMessage]) -> DispatchResult:
        provider = self.catalog.select()
        if provider is None:
            raise NoProviderAvailable("No provider has a usable credential")

        adapter = get_adapter(provider.wire_format)
        headers, body = adapter.build_request(messages, provider)

        client = await self._get_client()
        try:
            # Hard cap on the whole call; httpx timeouts only bound each phase
            response = await asyncio.wait_for(
                client.post(provider.endpoint_url, json=body, headers=headers),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise UpstreamTimeout(
                f"{provider.name} did not respond within {self.timeout}s", provider=provider.name
            ) from None
        except httpx.HTTPError as e:
            raise NetworkError(f"Cannot reach {provider.name}: {e}", provider=provider.name) from e

        self._raise_for_status(provider, response)

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError):
            raise MalformedResponse(
                f"{provider.name} returned a non-JSON body", provider=provider.name
            ) from None

        try:
            text = adapter.parse_response(payload)
        except MalformedResponse as e:
            e.provider = provider.name
            raise

        return DispatchResult(text=text, provider_name=provider.name, is_fallback=False)

    def _raise_for_status(self, provider: ProviderConfig, response: httpx.Response) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return

        detail = f"{provider.name} returned HTTP {status}: {_excerpt(response)}"

        if status in (401, 403):
            get_audit_logger().error(
                "Upstream authentication failed",
                extra={"audit_data": {
                    "provider": provider.name,
                    "upstream_status": status,
                    "upstream_body": _excerpt(response),
                }},
            )
            raise UpstreamAuthError(detail, provider=provider.name)
        if status == 429:
            raise UpstreamRateLimited(
                detail,
                provider=provider.name,
                retry_after=_parse_retry_after(response.headers.get("retry-after")),
            )
        if status >= 500:
            raise UpstreamServerError(detail, provider=provider.name)
        raise UpstreamRequestError(detail, provider=provider.name)

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None


def _parse_retry_after(value: str | None) -> int | None:
    """Retry-After in delta-seconds form, clamped to an hour. HTTP-date values are ignored."""
    if value is None:
        return None
    try:
        seconds = int(float(value.strip()))
    except (ValueError, OverflowError):
        # "inf", "nan" and out-of-range exponents fall back to the default
        return None
    return min(max(seconds, 0), MAX_RETRY_AFTER_SECONDS)


def _excerpt(response: httpx.Response, limit: int = 500) -> str:
    try:
        return response.text[:limit]
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return ""


_dispatcher: Dispatcher | None = None


def get_dispatcher() -> Dispatcher:
    """Get the dispatcher singleton, with the catalog built from settings."""
    global _dispatcher
    if _dispatcher is None:
        settings = get_settings()
        _dispatcher = Dispatcher(
            catalog=build_catalog(settings),
            timeout=settings.upstream_timeout_seconds,
        )
    return _dispatcher


async def close_dispatcher() -> None:
    """Gracefully close the upstream HTTP client on shutdown."""
    global _dispatcher
    if _dispatcher is not None:
        await _dispatcher.close()
        _dispatcher = None
