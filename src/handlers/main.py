"""
Lambda entrypoints for the relay.

One function serves both triggers: API Gateway requests go through the Mangum
adapter into the webhook app, SNS deliveries go to the dispatcher. The per
operation handlers are for consumer Lambdas bound to a single chat method.
"""

import asyncio
from typing import Any, Dict, List, Union

from models.message import is_sns_delivery
from services.context import RelayContext
from services.dispatch_service import ChatOperation
from utils.lazy import LazyCell
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Shared across warm invocations; built on the first event.
_context: LazyCell[RelayContext] = LazyCell(RelayContext)


def get_context() -> RelayContext:
    return _context.get()


def lambda_handler(event, context) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    """Route an HTTP or SNS event through the relay."""
    logger.info("EVENT", extra={"event": event})
    relay = get_context()
    if is_sns_delivery(event):
        return _dispatch(relay, relay.config.chat_operation, event)
    return relay.get_adapter()(event, context)


def post_message_handler(event, context) -> List[Dict[str, Any]]:
    """SNS consumer bound to chat.postMessage."""
    logger.info("EVENT", extra={"event": event})
    return _dispatch(get_context(), ChatOperation.POST_MESSAGE, event)


def post_ephemeral_handler(event, context) -> List[Dict[str, Any]]:
    """SNS consumer bound to chat.postEphemeral."""
    logger.info("EVENT", extra={"event": event})
    return _dispatch(get_context(), ChatOperation.POST_EPHEMERAL, event)


def _dispatch(relay: RelayContext, operation, event) -> List[Dict[str, Any]]:
    # Leaves the current event loop in place for the Mangum adapter.
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(relay.get_dispatcher().dispatch(operation, event))
    finally:
        pending = asyncio.all_tasks(loop)
        for task in pending:
            task.cancel()
        if pending:
            loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
