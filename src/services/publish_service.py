"""
Publish step of the webhook pipeline.

Turns the middleware's ResponseLocals into an SNS message, publishes it and
answers the Slack request.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool
from starlette.responses import JSONResponse, RedirectResponse, Response

from models.config import DEFAULT_OAUTH_SUCCESS_URI
from models.message import PublishEnvelope, ResponseLocals
from utils.error_handling import PublishError
from utils.logging_config import get_logger

logger = get_logger(__name__)

OAUTH_ROUTE = "/oauth"


def oauth_redirect_uri(template: str, message: Dict[str, Any]) -> str:
    """Fill {TEAM_ID} and {CHANNEL_ID} from an OAuth access response."""
    webhook = message.get("incoming_webhook") or {}
    team = message.get("team") or {}
    team_id = message.get("team_id") or team.get("id") or ""
    channel_id = webhook.get("channel_id") or ""
    uri = template.replace("{TEAM_ID}", str(team_id)).replace("{CHANNEL_ID}", str(channel_id))
    return urlunsplit(urlsplit(uri))


class PublishService:
    """Publishes webhook results to SNS and builds the terminal response."""

    def __init__(
        self,
        topic_arn: str,
        client=None,
        oauth_success_uri: Optional[str] = None,
    ):
        self.topic_arn = topic_arn
        self.oauth_success_uri = oauth_success_uri or DEFAULT_OAUTH_SUCCESS_URI
        self.client = client or boto3.client("sns")

    def build_envelope(self, locals_: ResponseLocals) -> PublishEnvelope:
        return PublishEnvelope.from_locals(locals_, self.topic_arn)

    def publish(self, envelope: PublishEnvelope) -> Optional[str]:
        """Send one envelope to SNS; returns the SNS message id."""
        try:
            response = self.client.publish(**envelope.to_sns_kwargs())
        except ClientError as exc:
            error = exc.response.get("Error", {})
            raise PublishError(
                error.get("Message") or str(exc), code=error.get("Code")
            ) from exc
        except BotoCoreError as exc:
            raise PublishError(str(exc), code=type(exc).__name__) from exc
        return response.get("MessageId")

    async def respond(self, route: str, locals_: ResponseLocals) -> Response:
        """Publish, then redirect (OAuth) or acknowledge with 204."""
        envelope = self.build_envelope(locals_)
        logger.info("PUBLISH", extra={"envelope": envelope.to_sns_kwargs()})

        try:
            message_id = await run_in_threadpool(self.publish, envelope)
        except PublishError as exc:
            logger.warning("RESPONSE [400]", extra={"error": exc.to_dict()})
            return JSONResponse(status_code=400, content=exc.to_dict())

        if route == OAUTH_ROUTE:
            uri = oauth_redirect_uri(self.oauth_success_uri, locals_.message)
            logger.info("RESPONSE [302]", extra={"location": uri, "message_id": message_id})
            return RedirectResponse(uri, status_code=302)

        logger.info("RESPONSE [204]", extra={"message_id": message_id})
        return Response(status_code=204)
