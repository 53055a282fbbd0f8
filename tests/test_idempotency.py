"""
Tests for the capture-id idempotency stores. DynamoDB is MOCKED.
"""

import asyncio
from datetime import datetime, timedelta
import pytest
from botocore.exceptions import ClientError
from unittest.mock import MagicMock

from data_access.dynamodb import COMPLETED, IN_PROGRESS, DynamoIdempotencyStore
from data_access.idempotency import InMemoryIdempotencyStore


def _client_error(code: str, operation: str = "PutItem") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestInMemoryIdempotencyStore:
    @pytest.mark.asyncio
    async def test_first_claim_wins(self):
        store = InMemoryIdempotencyStore()

        assert await store.claim("CAP-1") is True
        assert await store.claim("CAP-1") is False
        assert await store.claim("CAP-2") is True

    @pytest.mark.asyncio
    async def test_completed_key_stays_claimed(self):
        store = InMemoryIdempotencyStore()
        await store.claim("CAP-1")

        await store.complete("CAP-1")

        assert await store.claim("CAP-1") is False

    @pytest.mark.asyncio
    async def test_release_allows_a_new_claim(self):
        store = InMemoryIdempotencyStore()
        await store.claim("CAP-1")

        await store.release("CAP-1")

        assert await store.claim("CAP-1") is True

    @pytest.mark.asyncio
    async def test_release_does_not_undo_completion(self):
        store = InMemoryIdempotencyStore()
        await store.claim("CAP-1")
        await store.complete("CAP-1")

        await store.release("CAP-1")

        assert await store.claim("CAP-1") is False

    @pytest.mark.asyncio
    async def test_concurrent_claims_admit_one(self):
        store = InMemoryIdempotencyStore()

        results = await asyncio.gather(*(store.claim("CAP-1") for _ in range(10)))

        assert results.count(True) == 1


class TestDynamoIdempotencyStore:
    @pytest.mark.asyncio
    async def test_claim_is_a_conditional_put(self):
        table = MagicMock()
        store = DynamoIdempotencyStore(table)

        assert await store.claim("CAP-1") is True

        kwargs = table.put_item.call_args.kwargs
        assert kwargs["Item"]["PK"] == "CAPTURE#CAP-1"
        assert kwargs["Item"]["SK"] == "FULFILLMENT"
        assert kwargs["Item"]["status"] == IN_PROGRESS
        assert kwargs["ConditionExpression"].startswith("attribute_not_exists(PK)")
        assert kwargs["ExpressionAttributeValues"][":in_progress"] == IN_PROGRESS

    @pytest.mark.asyncio
    async def test_existing_item_means_already_claimed(self):
        table = MagicMock()
        table.put_item.side_effect = _client_error("ConditionalCheckFailedException")

        assert await DynamoIdempotencyStore(table).claim("CAP-1") is False

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        table = MagicMock()
        table.put_item.side_effect = _client_error("ProvisionedThroughputExceededException")

        with pytest.raises(ClientError):
            await DynamoIdempotencyStore(table).claim("CAP-1")

    @pytest.mark.asyncio
    async def test_complete_sets_status(self):
        table = MagicMock()

        await DynamoIdempotencyStore(table).complete("CAP-1")

        kwargs = table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"PK": "CAPTURE#CAP-1", "SK": "FULFILLMENT"}
        assert kwargs["ExpressionAttributeValues"][":s"] == COMPLETED

    @pytest.mark.asyncio
    async def test_release_deletes_in_progress_item(self):
        table = MagicMock()

        await DynamoIdempotencyStore(table).release("CAP-1")

        kwargs = table.delete_item.call_args.kwargs
        assert kwargs["Key"] == {"PK": "CAPTURE#CAP-1", "SK": "FULFILLMENT"}
        assert kwargs["ExpressionAttributeValues"] == {":s": IN_PROGRESS}

    @pytest.mark.asyncio
    async def test_release_of_completed_item_is_a_no_op(self):
        table = MagicMock()
        table.delete_item.side_effect = _client_error("ConditionalCheckFailedException", "DeleteItem")

        await DynamoIdempotencyStore(table).release("CAP-1")

    @pytest.mark.asyncio
    async def test_stale_in_progress_claim_can_be_taken_over(self):
        table = MagicMock()
        store = DynamoIdempotencyStore(table, claim_ttl_seconds=60)

        await store.claim("CAP-1")

        kwargs = table.put_item.call_args.kwargs
        assert "claimed_at < :stale_before" in kwargs["ConditionExpression"]
        claimed_at = datetime.fromisoformat(kwargs["Item"]["claimed_at"])
        stale_before = datetime.fromisoformat(kwargs["ExpressionAttributeValues"][":stale_before"])
        assert claimed_at - stale_before == timedelta(seconds=60)
