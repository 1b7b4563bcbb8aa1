"""Error taxonomy for the chat gateway.

Each error carries the HTTP status it maps to at the API boundary and a
``public_message`` that is safe to return to callers. Upstream detail stays
in ``detail`` (for logs only) and never reaches a response body.
"""


class GatewayError(Exception):
    """Base class for all gateway errors."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, detail: str = ""):
        self.detail = detail or self.public_message
        super().__init__(self.detail)


class InvalidInput(GatewayError):
    status_code = 400
    public_message = "Message is required and must be a non-empty string"

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        # Validation messages describe the caller's own input, so they are safe to return
        self.public_message = self.detail


class RateLimitExceeded(GatewayError):
    status_code = 429
    public_message = "Rate limit exceeded. Please try again later."

    def __init__(self, retry_after: int, detail: str = ""):
        super().__init__(detail)
        self.retry_after = retry_after


class DispatchError(GatewayError):
    """Base for failures raised by the dispatcher."""

    def __init__(self, detail: str = "", provider: str = ""):
        super().__init__(detail)
        self.provider = provider


class NoProviderAvailable(DispatchError):
    """No provider in the catalog has a usable credential. Triggers demo mode."""

    public_message = "No AI provider configured"


class UpstreamAuthError(DispatchError):
    status_code = 500
    public_message = "AI service configuration error. Please contact support."


class UpstreamRateLimited(DispatchError):
    status_code = 429
    public_message = "AI service is currently busy. Please try again in a moment."

    DEFAULT_RETRY_AFTER = 60

    def __init__(self, detail: str = "", provider: str = "", retry_after: int | None = None):
        super().__init__(detail, provider)
        self.retry_after = retry_after if retry_after is not None else self.DEFAULT_RETRY_AFTER


class UpstreamServerError(DispatchError):
    status_code = 503
    public_message = "AI service temporarily unavailable. Please try again later."


class UpstreamTimeout(DispatchError):
    status_code = 504
    public_message = "Request timeout. Please try again."


class NetworkError(DispatchError):
    status_code = 500
    public_message = "AI service error. Please try again."


class MalformedResponse(DispatchError):
    status_code = 500
    public_message = "AI service error. Please try again."


class UpstreamRequestError(DispatchError):
    """Non-2xx upstream status not covered by a more specific error (e.g. 400, 404)."""

    status_code = 500
    public_message = "AI service error. Please try again."
