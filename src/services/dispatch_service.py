"""
Consumer side of the relay: SNS deliveries become Slack chat calls.

Calls for one batch run concurrently. The first failed call rejects the whole
batch so Lambda/SNS redelivers it.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Dict, List, Union

from slack_sdk.errors import SlackApiError, SlackClientError

from models.message import DeliveryBatch, DeliveryRecord
from utils.error_handling import ChatAPIError, DispatchOperationError
from utils.logging_config import get_logger

logger = get_logger(__name__)


class ChatOperation(str, Enum):
    """Slack chat methods a consumer Lambda may be bound to."""

    POST_MESSAGE = "postMessage"
    POST_EPHEMERAL = "postEphemeral"
    UPDATE = "update"
    DELETE = "delete"
    SCHEDULE_MESSAGE = "scheduleMessage"


# Operation -> AsyncWebClient method.
CLIENT_METHODS: Dict[ChatOperation, str] = {
    ChatOperation.POST_MESSAGE: "chat_postMessage",
    ChatOperation.POST_EPHEMERAL: "chat_postEphemeral",
    ChatOperation.UPDATE: "chat_update",
    ChatOperation.DELETE: "chat_delete",
    ChatOperation.SCHEDULE_MESSAGE: "chat_scheduleMessage",
}


def resolve_operation(operation: Union[str, ChatOperation]) -> ChatOperation:
    """Map a configured name onto ChatOperation or raise DispatchOperationError."""
    try:
        return ChatOperation(operation)
    except ValueError:
        raise DispatchOperationError(str(operation)) from None


class DispatchService:
    """Invokes one Slack chat operation per delivered message."""

    def __init__(self, client):
        self.client = client

    async def dispatch(
        self, operation: Union[str, ChatOperation], event: Dict[str, Any]
    ) -> List[Dict[str, Any]]:
        """Return Slack responses in the same order as ``event["Records"]``."""
        op = resolve_operation(operation)
        batch = DeliveryBatch.from_event(event)
        logger.info(
            "Dispatching batch",
            extra={"operation": op.value, "records": len(batch)},
        )
        tasks = [asyncio.ensure_future(self._invoke(op, record)) for record in batch.records]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # Fail fast, but never leave sibling calls running.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _invoke(self, op: ChatOperation, record: DeliveryRecord) -> Dict[str, Any]:
        method = getattr(self.client, CLIENT_METHODS[op])
        logger.info(f"slack.chat.{op.value}", extra={"slack_message": record.message})
        try:
            response = await method(**record.message)
        except SlackApiError as exc:
            raise ChatAPIError(op.value, exc.response.get("error", str(exc))) from exc
        except (SlackClientError, TypeError) as exc:
            raise ChatAPIError(op.value, str(exc)) from exc
        return response.data
