"""DynamoDB-backed rate window store for multi-process deployments.

Items are keyed by client_id and carry an ``expires_at`` epoch attribute;
enable DynamoDB TTL on that attribute and stale windows are removed by the
table itself.

``increment`` never reads before it writes. A request is counted with a
conditional ``UpdateItem`` (``ADD count :one`` only while the window is live
and below the limit); if that condition fails, a conditional ``PutItem``
opens a fresh window only when none exists or the stored one has ended.
When both fail the window is live and full, or another process replaced it
in between, so a consistent read settles which.
"""

import asyncio
from decimal import Decimal

from botocore.exceptions import ClientError

from src.security.ratelimit import RateLimitStore, RateWindow

CONDITION_FAILED = "ConditionalCheckFailedException"
MAX_INCREMENT_ATTEMPTS = 3


def _is_condition_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == CONDITION_FAILED


def _to_window(item: dict) -> RateWindow:
    # boto3 returns numbers as Decimal
    return RateWindow(count=int(item["count"]), window_end=float(item["window_end"]))


class DynamoDBRateLimitStore(RateLimitStore):
    """Reads and writes rate windows in a DynamoDB table (partition key: client_id)."""

    def __init__(self, table_name: str, region: str = "us-east-1"):
        self._table_name = table_name
        self._region = region
        self._table = None

    def _get_table(self):
        """Lazy-init boto3 Table resource."""
        if self._table is None:
            import boto3

            dynamodb = boto3.resource("dynamodb", region_name=self._region)
            self._table = dynamodb.Table(self._table_name)
        return self._table

    async def increment(
        self, client_id: str, now: float, window_seconds: float, limit: int
    ) -> tuple[bool, RateWindow]:
        return await asyncio.to_thread(
            self._increment, client_id, now, window_seconds, limit,
        )

    async def get(self, client_id: str) -> RateWindow | None:
        return await asyncio.to_thread(self._get_item, client_id)

    async def set(self, client_id: str, window: RateWindow) -> None:
        await asyncio.to_thread(self._put_item, client_id, window)

    async def purge_expired(self, now: float) -> int:
        # Expiry is handled by the table's TTL setting
        return 0

    def _increment(
        self, client_id: str, now: float, window_seconds: float, limit: int
    ) -> tuple[bool, RateWindow]:
        window: RateWindow | None = None
        for _ in range(MAX_INCREMENT_ATTEMPTS):
            counted = self._add_to_live_window(client_id, now, limit)
            if counted is not None:
                return True, counted

            fresh = RateWindow(count=1, window_end=now + window_seconds)
            if self._open_window(client_id, fresh, now):
                return True, fresh

            window = self._get_item(client_id, consistent=True)
            if window is not None and window.window_end >= now and window.count >= limit:
                return False, window
            # The window changed between the two writes; go round again

        # Still contended after every attempt: deny rather than over-admit
        if window is None:
            window = RateWindow(count=limit, window_end=now + window_seconds)
        return False, window

    def _add_to_live_window(self, client_id: str, now: float, limit: int) -> RateWindow | None:
        try:
            resp = self._get_table().update_item(
                Key={"client_id": client_id},
                UpdateExpression="ADD #count :one",
                ConditionExpression=(
                    "attribute_exists(client_id) AND #count < :limit AND window_end >= :now"
                ),
                ExpressionAttributeNames={"#count": "count"},
                ExpressionAttributeValues={
                    ":one": 1,
                    ":limit": limit,
                    ":now": Decimal(str(now)),
                },
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if _is_condition_failure(e):
                return None
            raise
        return _to_window(resp["Attributes"])

    def _open_window(self, client_id: str, window: RateWindow, now: float) -> bool:
        try:
            self._get_table().put_item(
                Item=self._item(client_id, window),
                ConditionExpression="attribute_not_exists(client_id) OR window_end < :now",
                ExpressionAttributeValues={":now": Decimal(str(now))},
            )
        except ClientError as e:
            if _is_condition_failure(e):
                return False
            raise
        return True

    def _get_item(self, client_id: str, consistent: bool = False) -> RateWindow | None:
        resp = self._get_table().get_item(
            Key={"client_id": client_id}, ConsistentRead=consistent,
        )
        item = resp.get("Item")
        if not item:
            return None
        return _to_window(item)

    def _put_item(self, client_id: str, window: RateWindow) -> None:
        self._get_table().put_item(Item=self._item(client_id, window))

    @staticmethod
    def _item(client_id: str, window: RateWindow) -> dict:
        return {
            "client_id": client_id,
            "count": window.count,
            "window_end": Decimal(str(window.window_end)),
            "expires_at": int(window.window_end) + 1,
        }
