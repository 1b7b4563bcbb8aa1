"""AWS Lambda entry point.

Mangum translates API Gateway HTTP API (v2) events into ASGI. The app's
lifespan is disabled on Lambda, so logging is configured at cold start and
the upstream HTTP client is created lazily on the first chat request.
Use RATE_LIMIT_BACKEND=dynamodb here: concurrent Lambda instances do not
share in-memory rate windows.
"""

from mangum import Mangum

from src.logging.audit import setup_logging
from src.main import app

setup_logging()

handler = Mangum(app, lifespan="off")
