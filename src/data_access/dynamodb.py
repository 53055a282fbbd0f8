import asyncio
import logging
from datetime import datetime, timedelta, timezone
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

CAPTURE_PREFIX = "CAPTURE#"
FULFILLMENT_SK = "FULFILLMENT"
IN_PROGRESS = "IN_PROGRESS"
COMPLETED = "COMPLETED"

class DynamoIdempotencyStore:
    """
    Idempotency store backed by a DynamoDB table with a PK/SK key schema.
    Only the capture id and the fulfillment status are written.
    """
    def __init__(self, table, claim_ttl_seconds: float = 300):
        self.table = table
        # An IN_PROGRESS claim older than this belongs to a crashed worker and may be taken over.
        self.claim_ttl = timedelta(seconds=claim_ttl_seconds)

    @staticmethod
    def _key(capture_id: str) -> dict:
        return {
            "PK": f"{CAPTURE_PREFIX}{capture_id}",
            "SK": FULFILLMENT_SK
        }

    def _claim(self, capture_id: str) -> bool:
        now = datetime.now(timezone.utc)
        item = {
            **self._key(capture_id),
            "capture_id": capture_id,
            "status": IN_PROGRESS,
            "claimed_at": now.isoformat()
        }
        try:
            self.table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(PK) OR (#status = :in_progress AND claimed_at < :stale_before)",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={
                    ":in_progress": IN_PROGRESS,
                    ":stale_before": (now - self.claim_ttl).isoformat()
                }
            )
            return True
        except ClientError as e:
            if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
                logger.info(f"Idempotency check: capture {capture_id} is already claimed.")
                return False
            else:
                logger.error(f"Error claiming capture {capture_id}: {e}")
                raise

    def _complete(self, capture_id: str) -> None:
        self.table.update_item(
            Key=self._key(capture_id),
            UpdateExpression="SET #status = :s, completed_at = :t",
            ExpressionAttributeNames={"#status": "status"},
            ExpressionAttributeValues={
                ":s": COMPLETED,
                ":t": datetime.now(timezone.utc).isoformat()
            }
        )

    def _release(self, capture_id: str) -> None:
        try:
            self.table.delete_item(
                Key=self._key(capture_id),
                ConditionExpression="#status = :s",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={":s": IN_PROGRESS}
            )
        except ClientError as e:
            if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
                logger.info(f"Capture {capture_id} is no longer in progress; nothing to release.")
            else:
                logger.error(f"Error releasing capture {capture_id}: {e}")
                raise

    async def claim(self, key: str) -> bool:
        return await asyncio.to_thread(self._claim, key)

    async def complete(self, key: str) -> None:
        await asyncio.to_thread(self._complete, key)

    async def release(self, key: str) -> None:
        await asyncio.to_thread(self._release, key)
